import unittest

from linker.match_config import Category, MatchConfig
from linker.suggestions import (
    build_suggestions,
    find_first_occurrence,
    heading_link,
    insert_link,
    local_heading_link,
    note_link,
    property_link,
    tag_link,
)

from helpers import build_index, make_doc


class LinkFormatTests(unittest.TestCase):
    def test_link_strings(self):
        self.assertEqual(note_link("Machine Learning"), "[[Machine Learning]]")
        self.assertEqual(heading_link("Guide", "Setup Steps"), "[[Guide#Setup Steps]]")
        self.assertEqual(tag_link("project-x"), "#project-x")
        self.assertEqual(property_link("Guide"), "[[Guide]]")
        self.assertEqual(local_heading_link("Setup"), "[[#Setup]]")


class BuildSuggestionsTests(unittest.TestCase):
    def setUp(self):
        self.index = build_index(
            make_doc("setup.md", "Setup"),
            make_doc("guide.md", "Guide", headings=[("Setup", 3)], tags=[("#setup", 7)]),
            make_doc("faq.md", "FAQ", headings=[("Setup", 1)], properties={"topic": "Setup"}),
        )
        self.config = MatchConfig()

    def test_every_category_is_collected(self):
        result = build_suggestions(self.index, "setup", self.config, max_results=10)
        self.assertEqual([s.link_text for s in result.notes], ["[[Setup]]"])
        self.assertEqual([s.link_text for s in result.headings], ["[[Guide#Setup]]", "[[FAQ#Setup]]"])
        self.assertEqual([s.label for s in result.headings], ["Guide → #Setup", "FAQ → #Setup"])
        self.assertEqual([s.link_text for s in result.tags], ["#setup"])
        self.assertEqual(result.tags[0].label, "Guide (line 8)")
        self.assertEqual([s.label for s in result.properties], ["FAQ (topic)"])
        self.assertEqual(result.properties[0].link_text, "[[FAQ]]")
        self.assertIsNone(result.current_heading)
        self.assertFalse(result.is_empty())
        self.assertEqual(
            [category for category, _rows in result.sections()],
            [Category.NOTE, Category.HEADING, Category.TAG, Category.PROPERTY],
        )

    def test_active_document_is_filtered_and_marked(self):
        result = build_suggestions(self.index, "Setup", self.config, 10, active_document_id="guide.md")
        self.assertEqual([s.document_id for s in result.headings], ["faq.md"])
        self.assertEqual(result.tags, [])
        self.assertEqual(result.current_heading.link_text, "[[#Setup]]")
        self.assertEqual(result.current_heading.line, 3)

    def test_results_are_capped_per_category(self):
        result = build_suggestions(self.index, "setup", self.config, max_results=1)
        self.assertEqual(len(result.headings), 1)
        self.assertEqual(result.headings[0].document_id, "guide.md")

    def test_disabled_categories_are_skipped(self):
        config = MatchConfig(detect_notes=False, detect_headings=False)
        result = build_suggestions(self.index, "setup", config, 10, active_document_id="guide.md")
        self.assertEqual(result.notes, [])
        self.assertEqual(result.headings, [])
        self.assertIsNone(result.current_heading)

    def test_unknown_phrase_is_empty(self):
        result = build_suggestions(self.index, "nothing here", self.config, 10)
        self.assertTrue(result.is_empty())
        self.assertEqual(result.word_count, 2)


class InsertLinkTests(unittest.TestCase):
    def test_first_whole_word_occurrence_is_replaced(self):
        lines = ["Nothing here", "the setups and Setup, then setup"]
        self.assertEqual(find_first_occurrence(lines, "setup"), (1, 15, 20))
        updated = insert_link(lines, "setup", "[[Setup]]")
        self.assertEqual(updated, ["Nothing here", "the setups and [[Setup]], then setup"])
        self.assertEqual(lines[1], "the setups and Setup, then setup")

    def test_missing_phrase_leaves_lines(self):
        lines = ["alpha", "beta"]
        self.assertIsNone(find_first_occurrence(lines, "gamma"))
        self.assertEqual(insert_link(lines, "gamma", "[[Gamma]]"), lines)
        self.assertIsNone(find_first_occurrence(lines, "  "))


if __name__ == "__main__":
    unittest.main()
