import logging

import bs4
import pandas as pd

from trec_topics.data.query_source import TrecQuery
from trec_topics.data.tag_set import TagSet
from trec_topics.utils.settings import open_topic_file, resolve_encoding

logger = logging.getLogger(__name__)


class TopicsBuilder(object):
    def __init__(self):
        self.queries = []
        self.qids = []

    def add(self, query, qid=None):
        self.queries.append(query)
        self.qids.append(str(qid) if qid is not None else str(len(self.qids)))

    def to_df(self):
        return pd.DataFrame({"text_left": self.queries, "id_left": self.qids}, index=self.qids)


class TopicReader(object):
    def __call__(self, path):
        raise NotImplementedError


class TrecTopicReader(TopicReader):
    def __init__(self, tag_set: TagSet = None, encoding=None, ignore_label_tokens=None):
        self.tag_set = tag_set
        self.encoding = encoding
        self.ignore_label_tokens = ignore_label_tokens

    def __call__(self, path):
        source = TrecQuery.from_file(path,
                                     tag_set=self.tag_set,
                                     encoding=self.encoding,
                                     ignore_label_tokens=self.ignore_label_tokens)
        return source.to_df()


class TrecXmlTopicReader(TopicReader):
    """Reads the xml topics of the web track, ``<topic number="1"><query>..``"""

    def __init__(self, field="query", encoding=None):
        self.field = field
        self.encoding = encoding

    def __call__(self, path):
        builder = TopicsBuilder()
        with open_topic_file(path, resolve_encoding(self.encoding)) as fin:
            soup = bs4.BeautifulSoup("".join(fin), features="html.parser")

        for topic in soup.find_all("topic"):
            qid = topic.attrs.get("number")
            if not qid:
                logger.warning("Topic without a number in %s, skipping it", path)
                continue
            field = topic.find(self.field)
            text = " ".join(field.get_text().split()) if field else ""
            if not text:
                logger.warning("Topic %s of %s has no %s, skipping it",
                               qid, path, self.field)
                continue
            builder.add(text, qid)

        return builder.to_df()
