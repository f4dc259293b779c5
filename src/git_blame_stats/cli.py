from __future__ import annotations

import sys

from . import analysis_cli


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] in ("-h", "--help"):
        p = analysis_cli._build_parser()
        p.prog = "git-blame-stats"
        p.print_help()
        print("")
        print("commands:")
        print("  scan   Scan repositories and print the distinct-row dataset as JSON lines.")
        print("  html   Render an HTML report from one or more scan datasets.")
        print("")
        print("Run `git-blame-stats <command> --help` for command-specific options.")
        return 0
    if argv and argv[0] == "scan":
        return analysis_cli.scan_main(argv[1:])
    if argv and argv[0] == "html":
        return analysis_cli.html_main(argv[1:])
    return analysis_cli.main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
