"""WebDAV filesystem command-line tool."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TextIO

import httpx

from webdav_fs import Client, ClientConfig, CopyOptions, MoveOptions, Stats, WebDAVError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-webdav-fs",
        description="Filesystem operations on a WebDAV server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List a directory
  py-webdav-fs --url https://dav.example.com/remote.php/webdav/ ls /Documents

  # Upload a file without replacing an existing one
  py-webdav-fs put notes.txt /Documents/notes.txt --no-overwrite

  # Remove a directory tree
  py-webdav-fs rm -r /Documents/old

Unset connection options fall back to the WEBDAV_URL, WEBDAV_USERNAME,
WEBDAV_PASSWORD, WEBDAV_TOKEN and WEBDAV_TIMEOUT environment variables.
        """,
    )
    parser.add_argument("--url", help="WebDAV base URL")
    parser.add_argument("--user", help="username for Basic authentication")
    parser.add_argument("--password", help="password for Basic authentication")
    parser.add_argument("--token", help="bearer token (takes precedence over --user)")
    parser.add_argument("--timeout", type=float, help="request timeout in seconds")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug logging (logs request/response bodies with formatted XML)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="list a directory")
    ls.add_argument("-r", "--recursive", action="store_true", help="list the whole subtree")
    ls.add_argument("-a", "--all", action="store_true", help="include hidden entries")
    ls.add_argument("path", nargs="?", default="/")

    stat = sub.add_parser("stat", help="show file information")
    stat.add_argument("path")

    cat = sub.add_parser("cat", help="print a file")
    cat.add_argument("path")

    put = sub.add_parser("put", help="upload a local file")
    put.add_argument("local")
    put.add_argument("remote")
    put.add_argument("--no-overwrite", action="store_true", help="fail if the file exists")

    mkdir = sub.add_parser("mkdir", help="create a directory")
    mkdir.add_argument("-p", "--parents", action="store_true", help="create missing parents")
    mkdir.add_argument("path")

    rm = sub.add_parser("rm", help="remove a file or directory")
    rm.add_argument("-r", "--recursive", action="store_true", help="remove directory contents")
    rm.add_argument("-f", "--force", action="store_true", help="ignore missing paths")
    rm.add_argument("path")

    for name, help_text in (("cp", "copy a file or directory"), ("mv", "move a file or directory")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("src")
        cmd.add_argument("dest")
        cmd.add_argument("-n", "--no-clobber", action="store_true", help="do not overwrite")

    return parser


def format_entry(fi: Stats) -> str:
    kind = "d" if fi.is_dir else "-"
    modified = fi.mod_time.strftime("%Y-%m-%d %H:%M") if fi.mod_time else "-" * 16
    name = fi.path + "/" if fi.is_dir else fi.path
    return f"{kind} {fi.size:>12} {modified} {name}"


async def run(
    args: argparse.Namespace,
    http_client: httpx.AsyncClient | None = None,
    out: TextIO | None = None,
) -> None:
    """Execute a parsed command."""
    out = out or sys.stdout
    config = ClientConfig.from_env(
        base_url=args.url,
        username=args.user,
        password=args.password,
        token=args.token,
        timeout=args.timeout,
    )

    async with Client(config, http_client=http_client) as client:
        if args.command == "ls":
            for fi in await client.read_dir(args.path, recursive=args.recursive, include_hidden=args.all):
                print(format_entry(fi), file=out)
        elif args.command == "stat":
            fi = await client.stat(args.path)
            print(f"Path:     {fi.path}", file=out)
            print(f"Type:     {'directory' if fi.is_dir else 'file'}", file=out)
            print(f"Size:     {fi.size}", file=out)
            print(f"Modified: {fi.mod_time.isoformat() if fi.mod_time else '-'}", file=out)
            print(f"MIME:     {fi.mime_type or '-'}", file=out)
            print(f"ETag:     {fi.etag or '-'}", file=out)
        elif args.command == "cat":
            content = await client.read_file(args.path, use_cache=False)
            out.write(content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content)
        elif args.command == "put":
            local = Path(args.local)
            if not local.is_file():
                raise WebDAVError.invalid_argument(f"not a local file: {local}")
            await client.write_file(args.remote, local.read_bytes(), overwrite=not args.no_overwrite)
        elif args.command == "mkdir":
            await client.mkdir(args.path, recursive=args.parents)
        elif args.command == "rm":
            await client.rm(args.path, recursive=args.recursive, force=args.force)
        elif args.command == "cp":
            await client.copy(args.src, args.dest, CopyOptions(no_overwrite=args.no_clobber))
        elif args.command == "mv":
            await client.move(args.src, args.dest, MoveOptions(no_overwrite=args.no_clobber))


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the WebDAV filesystem tool."""
    args = build_parser().parse_args(argv)

    # Setup debug logging if requested
    if args.debug:
        from webdav_fs.debug import setup_debug_logging
        setup_debug_logging()

    try:
        asyncio.run(run(args))
    except WebDAVError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
