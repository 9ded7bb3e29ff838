import logging
from collections import namedtuple
from pathlib import Path
from typing import List

import pandas as pd

from trec_topics.data.extraction import Query, extract_queries
from trec_topics.data.tag_set import TagSet
from trec_topics.utils import settings

logger = logging.getLogger(__name__)

QuerySourceConfig = namedtuple("QuerySourceConfig",
                               ["topic_files", "tag_set", "encoding", "ignore_label_tokens"])


def make_config(topic_files, tag_set: TagSet = None, encoding: str = None,
                ignore_label_tokens: bool = None):
    if isinstance(topic_files, (str, Path)):
        topic_files = [topic_files]
    return QuerySourceConfig(
        topic_files=[str(f) for f in topic_files],
        tag_set=tag_set or TagSet.from_settings(),
        encoding=encoding or settings.desired_encoding(),
        ignore_label_tokens=settings.ignore_label_tokens() if ignore_label_tokens is None
        else ignore_label_tokens)


class TrecQuery(object):
    """The queries of one or more TREC topic files, with a forward cursor.

    ``next()`` hands out the query texts in file order, then topic order, and
    ``query_id`` is the id of the query it returned last. ``get_query`` is a
    linear scan over the ids, topic files are small and read once.
    """

    def __init__(self, config: QuerySourceConfig):
        self.config = config
        queries, any_succeeded = extract_queries(config.topic_files,
                                                 config.tag_set,
                                                 encoding=config.encoding,
                                                 ignore_label_tokens=config.ignore_label_tokens)
        self._topic_files = list(config.topic_files) if any_succeeded else None
        if self._topic_files is None:
            logger.error("Topic files were specified, but none could be parsed correctly to obtain any topics. "
                         "Check you have the correct topic files specified, and that tags %r are correct.",
                         config.tag_set)

        self._queries = tuple(q.text for q in queries)
        self._query_ids = tuple(q.qid for q in queries)
        self._index = 0

    @classmethod
    def from_file(cls, path, **kwargs):
        return cls(make_config([path], **kwargs))

    @classmethod
    def from_files(cls, paths, **kwargs):
        return cls(make_config(paths, **kwargs))

    @classmethod
    def from_settings(cls, **kwargs):
        return cls(make_config(settings.topic_files(), **kwargs))

    @classmethod
    def from_tags(cls, paths, doc_tag, id_tag, whitelist=None, blacklist=None, **kwargs):
        tag_set = TagSet(doc_tag, id_tag, whitelist=whitelist or (), blacklist=blacklist or ())
        return cls(make_config(paths, tag_set=tag_set, **kwargs))

    @property
    def topic_files(self):
        """The topic files queries were read from, None if no topics were obtained."""
        if self._topic_files is None:
            return None
        return list(self._topic_files)

    @property
    def index(self):
        return self._index

    @property
    def query_id(self):
        if not self._query_ids:
            return None
        return self._query_ids[self._index - 1 if self._index else 0]

    @property
    def query_ids(self) -> List[str]:
        return list(self._query_ids)

    def has_next(self):
        return self._index < len(self._queries)

    def next(self):
        if not self.has_next():
            return None
        query = self._queries[self._index]
        self._index += 1
        return query

    def reset(self):
        self._index = 0

    def get_query(self, qid):
        for query_id, query in zip(self._query_ids, self._queries):
            if query_id == qid:
                return query
        return None

    def to_list(self) -> List[str]:
        return list(self._queries)

    def to_df(self):
        return pd.DataFrame({"text_left": list(self._queries), "id_left": list(self._query_ids)},
                            index=list(self._query_ids))

    def remove(self):
        raise TypeError("Queries of a %s cannot be removed" % type(self).__name__)

    def __setitem__(self, key, value):
        raise TypeError("%s does not support item assignment" % type(self).__name__)

    def __delitem__(self, key):
        raise TypeError("%s does not support item deletion" % type(self).__name__)

    def __len__(self):
        return len(self._queries)

    def __iter__(self):
        for qid, query in zip(self._query_ids, self._queries):
            yield Query(qid, query)

    def __repr__(self):
        return "TrecQuery(%d queries from %r)" % (len(self), self.config.topic_files)
