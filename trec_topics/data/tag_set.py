import enum

from trec_topics.utils import settings


class TagRole(enum.Enum):
    ID = "id"
    PROCESS = "process"
    SKIP = "skip"
    IGNORE = "ignore"


def _normalize(tags):
    return frozenset(t.strip().upper() for t in tags or () if t and t.strip())


class TagSet(object):
    """Maps the tag names of a topic file dialect to their role.

    ``doc_tag`` bounds a topic, ``id_tag`` holds its identifier. Tags in
    ``whitelist`` are processed, tags in ``blacklist`` are skipped. With an
    empty whitelist every tag that is not blacklisted is processed.
    """

    def __init__(self, doc_tag, id_tag, whitelist=(), blacklist=()):
        if not doc_tag or not doc_tag.strip():
            raise ValueError("Expect a document tag name")
        if not id_tag or not id_tag.strip():
            raise ValueError("Expect an id tag name")

        self._doc_tag = doc_tag.strip().upper()
        self._id_tag = id_tag.strip().upper()
        self._whitelist = _normalize(whitelist)
        self._blacklist = _normalize(blacklist)

        if self._doc_tag == self._id_tag:
            raise ValueError("The id tag %s cannot also be the document tag" % self._id_tag)
        if self._id_tag in self._whitelist or self._id_tag in self._blacklist:
            raise ValueError("The id tag %s cannot be white or blacklisted" % self._id_tag)
        both = self._whitelist & self._blacklist
        if both:
            raise ValueError("Tags %s are both white and blacklisted" % ", ".join(sorted(both)))

    @classmethod
    def from_settings(cls):
        return cls(**settings.query_tags())

    @property
    def doc_tag(self):
        return self._doc_tag

    @property
    def id_tag(self):
        return self._id_tag

    @property
    def whitelist(self):
        return self._whitelist

    @property
    def blacklist(self):
        return self._blacklist

    def role(self, tag_name: str) -> TagRole:
        tag_name = tag_name.upper()
        if tag_name == self._id_tag:
            return TagRole.ID
        if tag_name in self._blacklist:
            return TagRole.SKIP
        if not self._whitelist or tag_name in self._whitelist:
            return TagRole.PROCESS
        return TagRole.IGNORE

    def is_doc_tag(self, tag_name):
        return tag_name.upper() == self._doc_tag

    def is_id_tag(self, tag_name):
        return self.role(tag_name) is TagRole.ID

    def is_tag_to_process(self, tag_name):
        return self.role(tag_name) is TagRole.PROCESS

    def is_tag_to_skip(self, tag_name):
        return self.role(tag_name) is TagRole.SKIP

    def __eq__(self, other):
        if not isinstance(other, TagSet):
            return NotImplemented
        return (self._doc_tag, self._id_tag, self._whitelist, self._blacklist) == \
               (other._doc_tag, other._id_tag, other._whitelist, other._blacklist)

    def __hash__(self):
        return hash((self._doc_tag, self._id_tag, self._whitelist, self._blacklist))

    def __repr__(self):
        return "TagSet(doc_tag=%r, id_tag=%r, whitelist=%r, blacklist=%r)" % (
            self._doc_tag, self._id_tag, sorted(self._whitelist), sorted(self._blacklist))


TREC_QUERY_TAGS = TagSet("TOP", "NUM", whitelist=["TITLE"], blacklist=["DESC", "NARR"])
