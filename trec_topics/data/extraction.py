import logging
from collections import namedtuple
from typing import List

from trec_topics.data.tag_set import TagRole, TagSet
from trec_topics.data.tokenizer import TopicFormatError, TopicTokenizer
from trec_topics.utils.settings import is_readable, open_topic_file, resolve_encoding

logger = logging.getLogger(__name__)

Query = namedtuple("Query", ["qid", "text"])

# words that merely repeat the name of the field they open, e.g. "Description:"
LABEL_TOKENS = {"DESC": "description", "NARR": "narrative"}
ID_LABEL_TOKEN = "number"


class MissingQueryIdError(TopicFormatError):
    pass


class _DocumentState(object):
    def __init__(self, ignore_label_tokens):
        self.qid = None
        self.words = []
        self.ignore_label_tokens = ignore_label_tokens
        self.seen_labels = set()

    def add_id(self, token):
        # "Number: 301" -> "301", the last fragment wins
        for part in token.split():
            if part.rstrip(":").lower() != ID_LABEL_TOKEN:
                self.qid = part

    def add_word(self, word, tag):
        if self.ignore_label_tokens and tag in LABEL_TOKENS and tag not in self.seen_labels:
            self.seen_labels.add(tag)
            if word.lower() == LABEL_TOKENS[tag]:
                return
        self.words.append(word)

    def to_query(self):
        text = " ".join(self.words).strip()
        if not text:
            return None
        if self.qid is None:
            raise MissingQueryIdError("No id tag found for this query")
        return Query(self.qid, text)


def read_document(document, ignore_label_tokens=True):
    """Assembles the tokens of one document into a :class:`Query`.

    Returns ``None`` for a document without any text to keep, and raises
    :class:`MissingQueryIdError` for a document with text but no id.
    """
    state = _DocumentState(ignore_label_tokens)
    for token in document:
        if not token.text or token.role is TagRole.SKIP:
            continue
        if token.role is TagRole.ID:
            state.add_id(token.text)
        elif token.role is TagRole.PROCESS:
            state.add_word(token.text, token.tag)
    return state.to_query()


def extract_queries_from_file(path, tag_set: TagSet, encoding: str,
                              ignore_label_tokens=True) -> List[Query]:
    if not is_readable(path):
        logger.error("The topics file %s does not exist, or it cannot be read.", path)
        return []

    queries = []
    try:
        with open_topic_file(path, encoding) as fin:
            for document in TopicTokenizer(fin, tag_set, ignore_missing_closing_tags=True):
                query = read_document(document, ignore_label_tokens)
                if query:
                    queries.append(query)
    except MissingQueryIdError:
        logger.error("Topic without an id tag in %s after %d topics; ignoring this topic file",
                     path, len(queries))
        return []
    except (IOError, UnicodeDecodeError, EOFError):
        # topics completed before the failure are kept
        logger.exception("Input/Output exception while extracting queries from the topic file named %s",
                         path)

    logger.info("Extracted %d queries from %s", len(queries), path)
    return queries


def extract_queries(topic_files, tag_set: TagSet, encoding: str = None,
                    ignore_label_tokens=True):
    """Extracts the queries of every topic file, in file order.

    A file that is missing or fails to parse is logged and skipped, it never
    stops the batch. Returns the queries and whether any file gave some.
    """
    encoding = resolve_encoding(encoding)
    queries = []
    any_succeeded = False
    for path in topic_files:
        found = extract_queries_from_file(path, tag_set, encoding, ignore_label_tokens)
        if found:
            any_succeeded = True
            queries.extend(found)
    return queries, any_succeeded
