import logging
import shutil
import sys

from tinyvcs.config import Settings
from tinyvcs.errors import TinyVcsError
from tinyvcs.models import ObjectType, Repository
from tinyvcs.utils import get_parser

logger = logging.getLogger(__name__)

LOG_INDENT = " " * 5


def print_log(repo: Repository, oid: str | None = None):
    for commit in repo.log(oid):
        sys.stdout.write(f"commit {commit.oid}\n\n")
        for line in commit.message.split("\n"):
            sys.stdout.write(f"{LOG_INDENT}{line}\n")
        sys.stdout.write("\n")


def run(args, settings: Settings) -> None:
    if args.command == "init":
        repo = Repository.init(settings=settings)
        sys.stdout.write(f"Initialized empty repository in {repo.git_folder.resolve()}\n")
        return

    repo = Repository.open(settings=settings)
    match args.command:
        case "hash-object":
            sys.stdout.write(f"{repo.hash_object(args.file)} {args.file}\n")
        case "cat-file":
            sys.stdout.flush()
            with repo.store.get(args.object, ObjectType.BLOB) as f:
                shutil.copyfileobj(f, sys.stdout.buffer, settings.chunk_size)
            sys.stdout.buffer.flush()
        case "write-tree":
            sys.stdout.write(f"{repo.write_tree()}\n")
        case "read-tree":
            repo.read_tree(args.tree)
        case "ls-tree":
            for entry in repo.ls_tree(args.tree):
                sys.stdout.write(f"{entry.kind} {entry.oid}\t{entry.name}\n")
        case "commit":
            if not args.message.strip():
                raise TinyVcsError("must specify a -message")
            sys.stdout.write(f"{repo.commit(args.message)}\n")
        case "log":
            print_log(repo, args.oid)


def main(argv=None) -> int:
    parser = get_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args, Settings.from_env())
    except (TinyVcsError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
