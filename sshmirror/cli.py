#!/usr/bin/env python3
"""
sshmirror  —  One-way live mirror of a local tree onto an SSH/SFTP host
=======================================================================

Subcommands:
  init      Create a .sshmirror config file in the current directory.
  watch     Mirror the local tree to the remote host and keep it in sync.
  status    Show the resolved configuration for the nearest .sshmirror.

Run 'sshmirror <subcommand> --help' for more details.
"""
import os
import sys
import argparse
from pathlib import Path


def _yq(value: str) -> str:
    """Wrap a string in YAML single quotes, escaping embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def _load_profile(args) -> dict:
    """Find .sshmirror, apply the selected profile and SSHMIRROR_* env overrides."""
    import sshmirror.config as _cfg

    config_path = _cfg.find_config_file()
    profile: dict = {}
    if config_path is not None:
        if args.verbose:
            print(f"[config] Using {config_path}")
        global_cfg = _cfg.load_global_config()
        data = _cfg.load_config_file(config_path)
        if global_cfg.get("defaults"):
            data = {**data, "defaults": {**global_cfg["defaults"], **data.get("defaults", {})}}
        profile = _cfg.get_profile(data, args.profile or "default")
        _cfg.apply_profile(profile)
    _cfg.apply_env()

    if config_path is None and not os.environ.get(_cfg.ENV_PREFIX + "REMOTE_HOST"):
        print("error: no .sshmirror file found in this directory or any parent.", file=sys.stderr)
        print("Run 'sshmirror init' or set SSHMIRROR_REMOTE_HOST.", file=sys.stderr)
        sys.exit(1)
    return profile


# ── init ─────────────────────────────────────────────────────────────────────

def cmd_init(args):
    """Create a .sshmirror profile file in the current directory."""
    from sshmirror import config as _cfg

    target = Path.cwd() / _cfg.CONFIG_FILE_NAME

    if target.exists() and not args.force:
        print(f"error: {_cfg.CONFIG_FILE_NAME} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    g_defaults = _cfg.load_global_config().get("defaults", {})

    local_root = str(Path(args.local or Path.cwd()).expanduser())

    remote_root = args.remote
    if not remote_root:
        base_remote = args.base_remote or g_defaults.get("base_remote", "")
        name = Path(local_root).resolve().name
        remote_root = f"{str(base_remote).rstrip('/')}/{name}" if base_remote else ""
        if sys.stdin.isatty():
            hint = remote_root or "same path as local"
            entered = input(f"Remote path [{hint}]: ").strip()
            remote_root = entered or remote_root

    server = args.server or g_defaults.get("server", "example.com")
    if not args.server and sys.stdin.isatty():
        val = input(f"Server hostname [{server}]: ").strip()
        if val:
            server = val

    user = args.user or g_defaults.get("user", "root")
    if not args.user and sys.stdin.isatty():
        val = input(f"SSH user [{user}]: ").strip()
        if val:
            user = val

    port = args.port or int(g_defaults.get("port", 22))
    if not args.port and sys.stdin.isatty():
        val = input(f"SSH port [{port}]: ").strip()
        if val:
            try:
                port = int(val)
            except ValueError:
                print("error: port must be a number.", file=sys.stderr)
                sys.exit(1)

    # Always use forward slashes in paths to avoid YAML backslash escape issues
    local_root_yaml = local_root.replace("\\", "/")

    lines = [
        "# .sshmirror — sshmirror project configuration",
        "#",
        "# profiles: list of mirror profiles for this project.",
        "# Each profile has: name, server, port, user, local_root, remote_root.",
        "# remote_root defaults to the local_root path when omitted.",
        "profiles:",
        f"  - name: {args.profile or 'default'}",
        f"    server: {_yq(server)}",
        f"    port: {port}",
        f"    user: {_yq(user)}",
        f"    local_root: {_yq(local_root_yaml)}",
    ]
    if remote_root:
        lines.append(f"    remote_root: {_yq(remote_root)}")
    if args.ssh_key:
        lines.append(f"    ssh_key: {_yq(args.ssh_key)}")
    lines.append(f"    settle_seconds: {_cfg.SETTLE_SECONDS}")

    content = "\n".join(lines) + "\n"

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── watch ────────────────────────────────────────────────────────────────────

def cmd_watch(args):
    """Bootstrap the remote root and mirror changes until interrupted."""
    import sshmirror.config as _cfg
    from sshmirror.core.errors import MirrorError
    from sshmirror.core.mirror_engine import run_mirror
    from sshmirror.core.ssh_manager import SFTPSession
    from sshmirror.utils.logging import set_verbose, warn
    from sshmirror.watch import Watcher

    _load_profile(args)
    set_verbose(args.verbose)

    settle = args.settle if args.settle is not None else _cfg.SETTLE_SECONDS
    local_root = _cfg.LOCAL_ROOT.expanduser().resolve()
    session = SFTPSession()
    watcher = Watcher(local_root, settle_seconds=settle, initial_sync=not args.no_initial_sync)

    try:
        run_mirror(session, watcher, local_root, _cfg.get_remote_root())
    except MirrorError as exc:
        warn(f"fatal: {exc}")
        sys.exit(1)
    except Exception as exc:
        warn(f"fatal: could not start mirror: {exc}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


# ── status ────────────────────────────────────────────────────────────────────

def cmd_status(args):
    """Print the resolved configuration."""
    import sshmirror.config as _cfg

    profile = _load_profile(args)
    print(f"\nProfile : {profile.get('name', 'default')}")
    print(f"Local   : {_cfg.LOCAL_ROOT.expanduser().resolve()}")
    print(f"Remote  : {_cfg.SSH_USER}@{_cfg.SSH_HOST}:{_cfg.SSH_PORT}:{_cfg.get_remote_root()}")
    print(f"Key     : {_cfg.SSH_KEY_PATH or '(ssh-agent / default keys)'}")
    print(f"Settle  : {_cfg.SETTLE_SECONDS}s")


# ── main ──────────────────────────────────────────────────────────────────────

def main(argv=None):
    """CLI entry point for sshmirror"""
    parser = argparse.ArgumentParser(
        prog="sshmirror",
        description="One-way live mirror of a local tree onto an SSH/SFTP host",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .sshmirror config file in the current directory",
        description="Create a .sshmirror YAML config file for this project.",
    )
    init_p.add_argument("--local", metavar="PATH",
                        help="Local root directory (default: current directory)")
    init_p.add_argument("--remote", metavar="PATH",
                        help="Remote root path (default: same as local)")
    init_p.add_argument("--server", metavar="HOST",
                        help="Remote server hostname or IP")
    init_p.add_argument("--user", metavar="NAME",
                        help="SSH username (default: root)")
    init_p.add_argument("--port", type=int, metavar="N",
                        help="SSH port (default: 22)")
    init_p.add_argument("--ssh-key", metavar="PATH",
                        help="Private key file (default: ssh-agent / ~/.ssh/id_*)")
    init_p.add_argument("--base-remote", metavar="PATH",
                        help="Base remote path used to build the default remote root")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .sshmirror")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── watch ─────────────────────────────────────────────────────────────────
    watch_p = subparsers.add_parser(
        "watch",
        help="Mirror local changes to the remote host continuously",
        description="Mirror the local tree onto the remote root using settings from .sshmirror.",
    )
    watch_p.add_argument("--profile", metavar="NAME", default="default",
                         help="Profile to use (default: default)")
    watch_p.add_argument("--settle", type=float, metavar="SECONDS", default=None,
                         help="Quiet period before a batch is sent (default: from config)")
    watch_p.add_argument("--no-initial-sync", action="store_true",
                         help="Only mirror changes made after startup")
    watch_p.add_argument("-v", "--verbose", action="store_true",
                         help="Show every operation, not just actions")

    # ── status ────────────────────────────────────────────────────────────────
    status_p = subparsers.add_parser(
        "status",
        help="Show the resolved configuration",
        description="Show settings for the nearest .sshmirror config.",
    )
    status_p.add_argument("--profile", metavar="NAME", default="default",
                          help="Profile to use (default: default)")
    status_p.add_argument("-v", "--verbose", action="store_true",
                          help="Show extra output")

    args = parser.parse_args(argv)

    if args.command == "init":
        cmd_init(args)
    elif args.command == "watch":
        cmd_watch(args)
    elif args.command == "status":
        cmd_status(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
