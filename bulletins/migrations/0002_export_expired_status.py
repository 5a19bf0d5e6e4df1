from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("bulletins", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="bulletinexport",
            name="status",
            field=models.CharField(
                choices=[("PENDING", "Pending"), ("READY", "Ready"), ("FAILED", "Failed"), ("EXPIRED", "Expired")],
                default="PENDING",
                max_length=12,
            ),
        ),
        migrations.AlterField(
            model_name="bulletin",
            name="general_average",
            field=models.DecimalField(decimal_places=2, max_digits=14),
        ),
    ]
