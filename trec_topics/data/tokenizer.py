import html
import re
from collections import namedtuple

from trec_topics.data.tag_set import TagSet

TAG_PATTERN = re.compile(r"<(/?)([A-Za-z][\w.:-]*)[^<>]*>")
PARTIAL_TAG_PATTERN = re.compile(r"</?[A-Za-z][^<>]*$")
WORD_PATTERN = re.compile(r"[^\W_]+")
MAX_TAG_LENGTH = 256

OPEN, CLOSE, TEXT = "open", "close", "text"

Token = namedtuple("Token", ["text", "tag", "role"])


class TopicFormatError(IOError):
    pass


class TopicTokenizer(object):
    """Splits an SGML-like topic file into documents of tagged tokens.

    Iterating the tokenizer yields one iterator of :class:`Token` per document,
    i.e. per region bounded by the doc tag of ``tag_set``. Each token carries the
    innermost open tag around it and the role of that tag. The whole text of a
    line inside the id tag is a single token, everywhere else tokens are runs of
    letters and digits.

    Classic TREC topics leave ``<num>``, ``<title>``, ``<desc>`` and ``<narr>``
    open, so missing closing tags are tolerated by default: an open tag stays
    open until the end of the document or a closing tag of an outer element.
    """

    def __init__(self, stream, tag_set: TagSet, ignore_missing_closing_tags=True):
        self.stream = stream
        self.tag_set = tag_set
        self.ignore_missing_closing_tags = ignore_missing_closing_tags
        self._reopened = False

    def __iter__(self):
        events = self._events()
        for kind, value in events:
            while kind == OPEN and self.tag_set.is_doc_tag(value):
                self._reopened = False
                document = self._document(events)
                yield document
                # drain whatever the caller left unread
                for _ in document:
                    pass
                if not self._reopened:
                    break

    def _events(self):
        pending = ""
        for line in self.stream:
            carried = bool(pending)
            text = pending + line
            pending = ""
            pos = 0
            for match in TAG_PATTERN.finditer(text):
                if match.start() > pos:
                    yield TEXT, text[pos:match.start()]
                yield (CLOSE if match.group(1) else OPEN), match.group(2).upper()
                pos = match.end()

            rest = text[pos:]
            partial = PARTIAL_TAG_PATTERN.search(rest)
            if partial and not carried and len(rest) - partial.start() <= MAX_TAG_LENGTH:
                # a tag broken over two lines, never more
                if partial.start() > 0:
                    yield TEXT, rest[:partial.start()]
                pending = rest[partial.start():]
            elif rest:
                yield TEXT, rest

        if pending:
            yield TEXT, pending

    def _document(self, events):
        doc_tag = self.tag_set.doc_tag
        open_tags = []

        for kind, value in events:
            if kind == TEXT:
                tag = open_tags[-1] if open_tags else doc_tag
                yield from self._tokens(value, tag)

            elif value == doc_tag:
                if kind == OPEN:
                    if not self.ignore_missing_closing_tags:
                        raise TopicFormatError("<%s> opened before </%s>" % (doc_tag, doc_tag))
                    self._reopened = True
                else:
                    self._check_closed(open_tags, "</%s> reached" % doc_tag)
                return

            elif kind == OPEN:
                open_tags.append(value)

            elif value in open_tags:
                while open_tags[-1] != value:
                    self._check_closed(open_tags, "</%s> reached" % value)
                    open_tags.pop()
                open_tags.pop()

            elif not self.ignore_missing_closing_tags:
                raise TopicFormatError("Closing tag </%s> does not match any open tag" % value)

        if not self.ignore_missing_closing_tags:
            raise TopicFormatError("End of file reached before </%s>" % doc_tag)

    def _check_closed(self, open_tags, where):
        if open_tags and not self.ignore_missing_closing_tags:
            raise TopicFormatError("Tag <%s> is not closed, %s" % (open_tags[-1], where))

    def _tokens(self, text, tag):
        role = self.tag_set.role(tag)
        text = html.unescape(text)
        if self.tag_set.is_id_tag(tag):
            text = text.strip()
            if text:
                yield Token(text, tag, role)
            return

        for word in WORD_PATTERN.findall(text):
            yield Token(word, tag, role)
