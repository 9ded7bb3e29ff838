import argparse
import logging
import sys

from trec_topics.data.query_source import TrecQuery
from trec_topics.data.tag_set import TagSet
from trec_topics.utils import settings


def build_parser():
    defaults = settings.query_tags()
    parser = argparse.ArgumentParser(description="Print the queries of TREC topic files")
    parser.add_argument("topics", nargs="+", help="topic files, plain or gzipped")
    parser.add_argument("--encoding", type=str, default=None)
    parser.add_argument("--doc-tag", type=str, default=defaults["doc_tag"])
    parser.add_argument("--id-tag", type=str, default=defaults["id_tag"])
    parser.add_argument("--process", type=str, nargs="*", default=defaults["whitelist"],
                        help="tags whose text forms the query, all tags if empty")
    parser.add_argument("--skip", type=str, nargs="*", default=defaults["blacklist"])
    parser.add_argument("--keep-label-tokens", action="store_true",
                        help="keep words like DESCRIPTION that open a field")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    tag_set = TagSet(args.doc_tag, args.id_tag, whitelist=args.process, blacklist=args.skip)
    source = TrecQuery.from_files(args.topics,
                                  tag_set=tag_set,
                                  encoding=args.encoding,
                                  ignore_label_tokens=False if args.keep_label_tokens else None)
    while source.has_next():
        query = source.next()
        print("%s: %s" % (source.query_id, query))

    return 0 if len(source) else 1


if __name__ == "__main__":
    sys.exit(main())
