import pathlib
from argparse import ArgumentParser


def get_parser():
    parser = ArgumentParser(prog="tinyvcs")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init
    _init_parser = subparsers.add_parser("init")

    # hash-object
    hash_object_parser = subparsers.add_parser("hash-object")
    hash_object_parser.add_argument("-file", "--file", dest="file", type=pathlib.Path, required=True)

    # cat-file
    cat_file_parser = subparsers.add_parser("cat-file")
    cat_file_parser.add_argument("-object", "--object", dest="object", required=True)

    # write-tree
    _write_tree_parser = subparsers.add_parser("write-tree")

    # read-tree
    read_tree_parser = subparsers.add_parser("read-tree")
    read_tree_parser.add_argument("-tree", "--tree", dest="tree", default=None)

    # ls-tree
    ls_tree_parser = subparsers.add_parser("ls-tree")
    ls_tree_parser.add_argument("-tree", "--tree", dest="tree", required=True)

    # commit
    commit_parser = subparsers.add_parser("commit")
    commit_parser.add_argument("-message", "--message", "-m", dest="message", required=True)

    # log
    log_parser = subparsers.add_parser("log")
    log_parser.add_argument("-oid", "--oid", dest="oid", default=None)

    return parser
