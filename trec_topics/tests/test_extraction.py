import io
import os
import tempfile
from unittest import TestCase

from trec_topics.data.extraction import MissingQueryIdError, Query, extract_queries, read_document
from trec_topics.data.tag_set import TREC_QUERY_TAGS, TagSet
from trec_topics.data.tokenizer import TopicTokenizer
from trec_topics.tests.topic_files import ROBUST_TOPICS, topic, write_topics

ALL_FIELDS = TagSet("top", "num", whitelist=["title", "desc", "narr"])
LOGGER = "trec_topics.data.extraction"


def read_first(text, tag_set=ALL_FIELDS, ignore_label_tokens=True):
    document = next(iter(TopicTokenizer(io.StringIO(text), tag_set)))
    return read_document(document, ignore_label_tokens)


class TestReadDocument(TestCase):

    def test_number_label_is_dropped_from_id(self):
        self.assertEqual(Query("301", "foo"), read_first("<top>\n<num> Number: 301\n<title> foo\n</top>"))
        self.assertEqual(Query("42", "foo"), read_first("<top><num>NUMBER 42</num><title>foo</title></top>"))

    def test_last_id_fragment_wins(self):
        self.assertEqual("b", read_first("<top><num>a number b</num><title>x</title></top>").qid)

    def test_description_label_is_dropped(self):
        query = read_first("<top>\n<num> Number: 301\n<desc> Description:\nfoo bar\n</top>")

        self.assertEqual(Query("301", "foo bar"), query)

    def test_label_word_kept_after_the_label(self):
        query = read_first("<top>\n<num> 301\n<desc> Description:\nfind the DESCRIPTION of foo\n</top>")

        self.assertEqual("find the DESCRIPTION of foo", query.text)

    def test_label_word_kept_when_not_first(self):
        query = read_first("<top>\n<num> 301\n<desc> Cases where the description is wrong\n</top>")

        self.assertEqual("Cases where the description is wrong", query.text)

    def test_narrative_label(self):
        query = read_first("<top>\n<num> 1\n<title> Title: spam\n<desc> Description: eggs\n"
                           "<narr> Narrative:\nnarrative ham\n</top>")

        self.assertEqual("Title spam eggs narrative ham", query.text)

    def test_words_named_after_other_tags_are_kept(self):
        tag_set = TagSet("query", "qid", whitelist=["content"])

        query = read_first("<query><qid>1</qid><content>content moderation policy</content></query>",
                           tag_set=tag_set)

        self.assertEqual(Query("1", "content moderation policy"), query)

    def test_label_tokens_kept_when_disabled(self):
        query = read_first("<top>\n<num> 1\n<desc> Description: eggs\n<narr> Narrative: ham\n</top>",
                           ignore_label_tokens=False)

        self.assertEqual("Description eggs Narrative ham", query.text)

    def test_whitespace_is_normalized(self):
        query = read_first("<top><num>1</num><title>  foo  \n\n   bar\t</title></top>")

        self.assertEqual("foo bar", query.text)

    def test_skipped_and_ignored_tags(self):
        query = read_first(ROBUST_TOPICS, tag_set=TREC_QUERY_TAGS)

        self.assertEqual(Query("301", "International Organized Crime"), query)

    def test_empty_document(self):
        self.assertIsNone(read_first("<top><num>1</num><desc></desc></top>"))
        self.assertIsNone(read_first("<top><title>   </title></top>"))

    def test_missing_id(self):
        with self.assertRaises(MissingQueryIdError):
            read_first("<top><title>no id here</title></top>")
        with self.assertRaises(MissingQueryIdError):
            read_first("<top><num>Number:</num><title>only a label</title></top>")


class TestExtractQueries(TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.folder = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name, content, encoding="utf-8"):
        return write_topics(self.folder, name, content, encoding)

    def test_robust_topics(self):
        path = self.write("robust.txt", ROBUST_TOPICS)

        queries, ok = extract_queries([path], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual(["301", "302"], [q.qid for q in queries])
        self.assertTrue(queries[0].text.startswith("International Organized Crime Identify organizations"))
        self.assertNotIn("Description", queries[0].text)
        self.assertNotIn("Narrative", queries[1].text)
        self.assertTrue(queries[1].text.endswith("polio disease large or small scale"))

    def test_empty_documents_are_dropped(self):
        path = self.write("topics.txt", topic("1", ("title", "one")) + "<top><num> 2\n</top>\n"
                          + topic("3", ("title", "three")))

        queries, ok = extract_queries([path], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("1", "one"), Query("3", "three")], queries)

    def test_duplicate_ids_are_kept(self):
        path = self.write("topics.txt", topic("1", ("title", "a")) + topic("1", ("title", "b")))

        queries, _ = extract_queries([path], ALL_FIELDS, encoding="utf-8")

        self.assertSequenceEqual([Query("1", "a"), Query("1", "b")], queries)

    def test_multiple_files_in_order(self):
        first = self.write("a.txt", topic("401", ("title", "first topic")))
        second = self.write("b.txt", topic("402", ("title", "second topic")))

        queries, ok = extract_queries([second, first], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("402", "second topic"), Query("401", "first topic")], queries)

    def test_missing_file_is_skipped(self):
        path = self.write("a.txt", topic("1", ("title", "a")))
        missing = os.path.join(self.folder, "missing.txt")

        with self.assertLogs(LOGGER, level="ERROR") as logs:
            queries, ok = extract_queries([missing, path], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("1", "a")], queries)
        self.assertIn("missing.txt does not exist", logs.output[0])

    def test_missing_id_fails_only_its_file(self):
        good = self.write("good.txt", topic("1", ("title", "kept")))
        bad = self.write("bad.txt", topic("2", ("title", "lost")) + "<top>\n<title> no id\n</top>\n"
                         + topic("3", ("title", "lost too")))

        with self.assertLogs(LOGGER, level="ERROR") as logs:
            queries, ok = extract_queries([good, bad], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("1", "kept")], queries)
        self.assertIn("without an id tag", logs.output[0])

    def test_no_queries(self):
        bad = self.write("bad.txt", "<top><title>no id</title></top>")

        with self.assertLogs(LOGGER, level="ERROR"):
            queries, ok = extract_queries([bad], ALL_FIELDS, encoding="utf-8")

        self.assertFalse(ok)
        self.assertSequenceEqual([], queries)
        self.assertSequenceEqual(([], False), extract_queries([], ALL_FIELDS, encoding="utf-8"))

    def test_decoding_error_keeps_completed_topics(self):
        data = (topic("1", ("title", "one")) + topic("2", ("title", "two"))).encode("utf-8") + \
            b"<top><num> 3<title> bad \xff bytes</top>\n" + topic("4", ("title", "four")).encode("utf-8")
        path = self.write("broken.txt", data)

        with self.assertLogs(LOGGER, level="ERROR") as logs:
            queries, ok = extract_queries([path], ALL_FIELDS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("1", "one"), Query("2", "two")], queries)
        self.assertIn("Input/Output exception", logs.output[0])

    def test_decoding_error_in_first_topic(self):
        data = b"<top><num> 1<title> bad \xff</top>\n" + topic("2", ("title", "two")).encode("utf-8")
        path = self.write("broken.txt", data)

        with self.assertLogs(LOGGER, level="ERROR"):
            queries, ok = extract_queries([path], ALL_FIELDS, encoding="utf-8")

        self.assertFalse(ok)
        self.assertSequenceEqual([], queries)

    def test_encoding(self):
        path = self.write("latin.txt", topic("1", ("title", "café crème")), encoding="latin-1")

        queries, _ = extract_queries([path], ALL_FIELDS, encoding="latin-1")

        self.assertSequenceEqual([Query("1", "café crème")], queries)

    def test_gzipped_topics(self):
        path = self.write("robust.txt.gz", ROBUST_TOPICS)

        queries, ok = extract_queries([path], TREC_QUERY_TAGS, encoding="utf-8")

        self.assertTrue(ok)
        self.assertSequenceEqual([Query("301", "International Organized Crime"),
                                  Query("302", "Poliomyelitis and Post Polio")], queries)
