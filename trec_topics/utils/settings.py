import codecs
import contextlib
import gzip
import locale
import logging
import os

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "yes", "1", "on")
FALSE_VALUES = ("false", "no", "0", "off")


def parse_comma_list(value):
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def parse_bool(value, default=False):
    if value is None or not value.strip():
        return default
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError("Expect a boolean setting, got %r" % value)


def topic_files():
    return parse_comma_list(os.environ.get("TREC_TOPICS", ""))


def desired_encoding():
    return os.environ.get("TREC_ENCODING") or None


def ignore_label_tokens():
    return parse_bool(os.environ.get("TRECQUERY_IGNORE_LABEL_TOKENS"), default=True)


def query_tags():
    return {
        "doc_tag": os.environ.get("TREC_QUERY_TAGS_DOC") or "TOP",
        "id_tag": os.environ.get("TREC_QUERY_TAGS_ID") or "NUM",
        "whitelist": parse_comma_list(os.environ.get("TREC_QUERY_TAGS_PROCESS", "TITLE")),
        "blacklist": parse_comma_list(os.environ.get("TREC_QUERY_TAGS_SKIP", "DESC,NARR")),
    }


def resolve_encoding(encoding=None):
    """Returns ``encoding`` if set, otherwise the platform default.

    Falling back to a default that is not UTF-8 is allowed but makes the
    parsed topics platform dependent, so it is logged.
    """
    if encoding:
        return encoding

    default_encoding = locale.getpreferredencoding(False)
    if codecs.lookup(default_encoding).name != "utf-8":
        logger.warning("TREC_ENCODING is not set; resorting to platform default (%s). "
                       "Retrieval may be platform dependent. Recommend TREC_ENCODING=UTF-8",
                       default_encoding)
    return default_encoding


def is_readable(path):
    path = str(path)
    return os.path.isfile(path) and os.access(path, os.R_OK)


@contextlib.contextmanager
def open_topic_file(path, encoding):
    """Opens a plain or gzipped topic file as an iterator of decoded lines.

    Lines are decoded one at a time, so a decoding error surfaces at the
    offending line and every line before it has already been handed out.
    """
    path = str(path)
    opener = gzip.open if path.endswith(".gz") else open
    with opener(path, "rb") as fin:
        yield _decode_lines(fin, encoding)


def _decode_lines(fin, encoding):
    decoder = codecs.getincrementaldecoder(encoding)()
    for line in fin:
        text = decoder.decode(line)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail
