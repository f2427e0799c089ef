import argparse
import os
import platform as _platform
import sys

from . import publish
from .errors import MakeUpdateError
from .repository import Repository

_GOOS = {
    'linux': 'linux',
    'darwin': 'darwin',
    'windows': 'windows',
    'freebsd': 'freebsd',
    'openbsd': 'openbsd',
    'netbsd': 'netbsd',
}

_GOARCH = {
    'x86_64': 'amd64',
    'amd64': 'amd64',
    'aarch64': 'arm64',
    'arm64': 'arm64',
    'i386': '386',
    'i686': '386',
    'x86': '386',
    'armv7l': 'arm',
    'armv6l': 'arm',
}

USAGE_EXAMPLES = """
Positional arguments:
\tSingle platform: makeupdate myapp 1.2
\tCross platform: makeupdate /tmp/mybinaries/ 1.2"""


def default_platform(environ=os.environ) -> str:
    """GOOS-GOARCH when both are set, otherwise the host os/arch in the same naming."""
    goos = environ.get("GOOS", "")
    goarch = environ.get("GOARCH", "")
    if goos and goarch:
        return f"{goos}-{goarch}"
    system = _platform.system().lower()
    machine = _platform.machine().lower()
    return f"{_GOOS.get(system, system)}-{_GOARCH.get(machine, machine)}"


def create_updates(repo: Repository, app_path: str, version: str, platform: str, workers: int | None = None):
    """Publish a single binary, or every file of a directory using its filename as the platform."""
    if os.path.isdir(app_path):
        results = []
        for name in sorted(os.listdir(app_path)):
            path = os.path.join(app_path, name)
            if not os.path.isfile(path):
                print(f"{path} is not a file, skipped", flush=True)
                continue
            results.append(publish.create_update(repo, path, version, name, workers))
        return results
    return [publish.create_update(repo, app_path, version, platform, workers)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='makeupdate', description="Generate self-update releases, bsdiff patches and manifests.")
    parser.add_argument('app_path', nargs='?', help="binary to publish, or a directory of binaries named after their platform")
    parser.add_argument('version', nargs='?', help="version being published")
    parser.add_argument('-o', '--output', default='public', help="output directory for writing updates (default: %(default)s)")
    parser.add_argument('--platform', default=default_platform(),
                        help="target platform in the form OS-ARCH. Defaults to running os/arch or the combination of "
                             "the environment variables GOOS and GOARCH if both are set (default: %(default)s)")
    parser.add_argument('--workers', type=int, default=None,
                        help=f"parallel patch jobs (default: number of CPUs, at most {publish.MAX_WORKERS})")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.app_path is None or args.version is None:
        parser.print_help()
        print(USAGE_EXAMPLES)
        return 0
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be a positive integer")

    if not os.path.exists(args.app_path):
        print(f"error: can't stat {args.app_path}: no such file or directory", file=sys.stderr)
        return 1

    repo = Repository(args.output)
    try:
        create_updates(repo, args.app_path, args.version, args.platform, args.workers)
    except (MakeUpdateError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
