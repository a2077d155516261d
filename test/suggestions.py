# python
"""
Suggestion engine tests (edit distance, threshold, nearest candidate).

Scope
- Validate the optimal string alignment distance (insertions, deletions,
  substitutions, adjacent transpositions, case-insensitivity).
- Validate the typo threshold and the nearest-candidate selection rules.

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from commandant.suggestions import distance, threshold, suggest


class TestDistance(TestCase):
    """Behavioral tests for distance()."""

    def testIdenticalStringsAreAtZero(self):
        self.assertEqual(distance("build", "build"), 0)

    def testComparisonIgnoresCase(self):
        self.assertEqual(distance("Build", "bUILD"), 0)

    def testSingleInsertion(self):
        self.assertEqual(distance("buld", "build"), 1)

    def testSingleDeletion(self):
        self.assertEqual(distance("buildd", "build"), 1)

    def testSingleSubstitution(self):
        self.assertEqual(distance("bqild", "build"), 1)

    def testAdjacentTranspositionCountsOnce(self):
        self.assertEqual(distance("--nmae", "--name"), 1)

    def testTranspositionIsNotReusedForLaterEdits(self):
        # Optimal string alignment, not unrestricted Damerau-Levenshtein.
        self.assertEqual(distance("ca", "abc"), 3)

    def testEmptyStrings(self):
        self.assertEqual(distance("", "abc"), 3)
        self.assertEqual(distance("abc", ""), 3)
        self.assertEqual(distance("", ""), 0)

    def testIsSymmetric(self):
        self.assertEqual(distance("kitten", "sitting"), distance("sitting", "kitten"))
        self.assertEqual(distance("kitten", "sitting"), 3)

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            distance("a", 1)


class TestThreshold(TestCase):
    """Behavioral tests for threshold()."""

    def testShortTokensAllowOneEdit(self):
        self.assertEqual(threshold(""), 1)
        self.assertEqual(threshold("ab"), 1)

    def testScalesWithTokenLength(self):
        self.assertEqual(threshold("--nmae"), 2)
        self.assertEqual(threshold("abcdefghij"), 4)


class TestSuggest(TestCase):
    """Behavioral tests for suggest()."""

    def testOneEditTypoIsSuggested(self):
        self.assertEqual(suggest("buld", ["build", "test"]), "build")

    def testTransposedOptionIsSuggested(self):
        self.assertEqual(suggest("--nmae", ["-n", "--name", "-h", "--help"]), "--name")

    def testFarTokenHasNoSuggestion(self):
        self.assertIsNone(suggest("xyz", ["build", "test"]))

    def testNoCandidatesHasNoSuggestion(self):
        self.assertIsNone(suggest("build", []))

    def testLowestDistanceWins(self):
        self.assertEqual(suggest("tests", ["toast", "test"]), "test")

    def testTiesGoToEarliestCandidate(self):
        self.assertEqual(suggest("bat", ["cat", "hat"]), "cat")
        self.assertEqual(suggest("bat", ["hat", "cat"]), "hat")

    def testSuggestionKeepsCandidateSpelling(self):
        self.assertEqual(suggest("BUILD", ["build"]), "build")

    def testAcceptsAnyIterable(self):
        self.assertEqual(suggest("tset", iter(["build", "test"])), "test")

    def testRejectsNonStringToken(self):
        with self.assertRaises(TypeError):
            suggest(1, ["build"])


if __name__ == "__main__":
    unittest.main()
