from django.test import SimpleTestCase

from bulletins.services.formula import evaluate_formula, final_grade, validate_formula


class EvaluateFormulaTests(SimpleTestCase):
    def test_high_school_formula(self):
        result = evaluate_formula("(examens + devoirs * 2) / 3", examens=10, devoirs=13)
        self.assertTrue(result.ok)
        self.assertAlmostEqual(result.value, 12.0)

    def test_projets_is_bound(self):
        result = evaluate_formula("(examens + devoirs + projets) / 3", examens=12, devoirs=9, projets=0)
        self.assertAlmostEqual(result.value, 7.0)

    def test_functions_and_power(self):
        self.assertAlmostEqual(evaluate_formula("max(examens, devoirs)", 8, 15).value, 15.0)
        self.assertAlmostEqual(evaluate_formula("examens ^ 2", 3, 0).value, 9.0)

    def test_invalid_formulas_are_errors(self):
        for formula in ["", "   ", "examens +", "inconnu * 2", "__import__('os')", "examens > devoirs"]:
            with self.subTest(formula=formula):
                result = evaluate_formula(formula, 10, 10)
                self.assertFalse(result.ok)
                self.assertIsNone(result.value)

    def test_division_by_zero_is_error(self):
        self.assertFalse(evaluate_formula("examens / (devoirs - devoirs)", 10, 10).ok)


class FinalGradeTests(SimpleTestCase):
    def test_no_formula_uses_simple_mean(self):
        self.assertEqual(final_grade(None, 10, 14), 12.0)
        self.assertEqual(final_grade("", 10, 14), 12.0)

    def test_broken_formula_falls_back_and_logs(self):
        with self.assertLogs("bulletins.services.formula", level="WARNING") as logs:
            self.assertEqual(final_grade("examens +* 2", 10, 14, school_id=3), 12.0)
        self.assertIn("Grading formula failed", logs.output[0])

    def test_validate_formula(self):
        self.assertTrue(validate_formula("(examens + devoirs) / 2").ok)
        self.assertFalse(validate_formula("notes / 2").ok)

    def test_formula_valid_except_at_one_point(self):
        # division par zéro seulement pour examens == 12
        self.assertFalse(evaluate_formula("devoirs / (examens - 12)", 12, 14).ok)
        self.assertTrue(validate_formula("devoirs / (examens - 12)").ok)

    def test_validation_reports_first_error(self):
        result = validate_formula("examens +")
        self.assertFalse(result.ok)
        self.assertIn("SyntaxError", result.error)


class ResultRangeTests(SimpleTestCase):
    def test_huge_result_is_an_error(self):
        result = evaluate_formula("examens * 1000000000", 20, 0)
        self.assertFalse(result.ok)
        self.assertIn("out of range", result.error)

    def test_huge_result_falls_back(self):
        with self.assertLogs("bulletins.services.formula", level="WARNING"):
            self.assertEqual(final_grade("examens * 1000000000", 10, 14), 12.0)
