import argparse
import json
import logging
import os
import sys

from git_graph_layout import to_view_model
from git_manager import GitManager
from settings import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


def setup_logging():
    # 根据环境变量设置日志级别
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO

    # 配置日志
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    # add file handler
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("gitlanes.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


def main(argv=None):
    setup_logging()

    parser = argparse.ArgumentParser(description="Lay out the commit graph of a repository as swimlane rows")
    parser.add_argument("repo_path", nargs="?", default=".", help="git work tree (default: current directory)")
    parser.add_argument("--limit", type=int, default=None, help="number of commits to load")
    parser.add_argument("--base", default=None, help="ref to mark as base, e.g. origin/main")
    args = parser.parse_args(argv)

    repo_path = os.path.abspath(args.repo_path)
    git_manager = GitManager(repo_path)
    if not git_manager.initialize():
        print(f"Not a git repository: {repo_path}", file=sys.stderr)
        return 1

    limit = args.limit or settings.get_history_limit()
    base_ref = args.base or settings.get_base_ref()

    snapshot = git_manager.get_git_history(limit=limit, base_ref=base_ref)
    view_models = to_view_model(snapshot)
    settings.add_recent_folder(repo_path)

    output = {
        "hasMore": snapshot.has_more,
        "nextCursor": snapshot.next_cursor,
        "rows": [vm.to_dict() for vm in view_models],
    }
    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
