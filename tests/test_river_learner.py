"""Unit tests for the river classifier adapter."""

import unittest

from river import linear_model, tree

from river_learner import MIN_DELTA, LearnerHandle, RiverLearner

X = {"a": 1.0, "b": 0.0}


def make_learner():
    return RiverLearner(tree.HoeffdingTreeClassifier(grace_period=50, delta=0.01, leaf_prediction="mc"))


class TestRiverLearner(unittest.TestCase):

    def test_is_a_learner_handle(self):
        self.assertIsInstance(make_learner(), LearnerHandle)

    def test_rejects_non_classifier(self):
        with self.assertRaises(TypeError):
            RiverLearner(object())

    def test_untrained_predictions(self):
        learner = make_learner()
        self.assertEqual(learner.predict_proba(X), {})
        self.assertFalse(learner.correctly_classifies(X, "yes"))

    def test_trains_and_classifies(self):
        learner = make_learner()
        for _ in range(5):
            learner.train(X, "yes")
        self.assertTrue(learner.correctly_classifies(X, "yes"))
        self.assertFalse(learner.correctly_classifies(X, "no"))

    def test_copies_are_independent(self):
        original = make_learner()
        clone = original.copy()
        clone.train(X, "yes")
        self.assertEqual(original.predict_proba(X), {})
        self.assertTrue(clone.predict_proba(X))
        self.assertIsNot(original.model, clone.model)

    def test_hyperparameters_forward_to_river(self):
        learner = make_learner()
        learner.grace_period = 120
        learner.split_confidence = 0.35
        learner.tie_threshold = 0.6
        self.assertEqual(learner.model.grace_period, 120)
        self.assertEqual(learner.model.delta, 0.35)
        self.assertEqual(learner.model.tau, 0.6)

    def test_zero_split_confidence_is_floored(self):
        learner = make_learner()
        learner.split_confidence = 0.0
        self.assertEqual(learner.split_confidence, 0.0)
        self.assertEqual(learner.model.delta, MIN_DELTA)

    def test_reset_keeps_hyperparameters(self):
        learner = make_learner()
        learner.grace_period = 70
        learner.tie_threshold = 0.25
        learner.split_confidence = 0.0
        learner.train(X, "yes")

        learner.reset()

        self.assertEqual(learner.predict_proba(X), {})
        self.assertEqual(learner.grace_period, 70)
        self.assertEqual(learner.tie_threshold, 0.25)
        self.assertEqual(learner.split_confidence, 0.0)
        self.assertEqual(learner.model.delta, MIN_DELTA)

    def test_model_without_tree_attributes(self):
        with self.assertRaises(AttributeError):
            RiverLearner(linear_model.LogisticRegression())


if __name__ == "__main__":
    unittest.main()
