import concurrent.futures
import functools
import os
import threading

from . import dataproc
from . import iohelper
from . import manifest
from .errors import MissingReleaseArtifact, RepositoryWriteError, SourceUnreadable
from .model import Cancelled, CurrentVersion, EntryOutcome, NoRelease, NotADirectory, NotAVersion, PatchCreated, PublishResult
from .repository import Repository, VersionEntry, check_identifier, is_identifier

# upper bound on parallel bsdiff jobs, each one holds two full binaries in memory
MAX_WORKERS = int(os.environ.get("MAKEUPDATE_MAX_WORKERS", "6"))

log = functools.partial(print, flush=True)


def _format_size(size: int) -> str:
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def _log_previous_manifest(path: str, platform: str):
    if not os.path.isfile(path):
        log(f"No previous manifest for {platform}")
        return
    try:
        previous = manifest.read_manifest(path)["Version"]
    except (OSError, ValueError, KeyError, TypeError) as e:
        # overwritten right after, only worth a note
        log(f"Previous manifest {path} is unreadable, replacing it: {e!r}")
        return
    log(f"Replacing {platform} manifest for version {previous}")


def worker_count(requested: int | None = None) -> int:
    if requested is not None:
        if requested < 1:
            raise ValueError(f"worker count must be positive: {requested}")
        return requested
    return max(1, min(os.cpu_count() or 1, MAX_WORKERS))


def publish_release(repo: Repository, source: os.PathLike, version: str, platform: str) -> str:
    """Store the gzipped source binary as the release artifact of (version, platform).

    Must complete before any patch job starts, patch jobs read it back from disk.
    """
    release = repo.release_path(version, platform)
    try:
        raw = iohelper.read_file(source)
    except OSError as e:
        raise SourceUnreadable(source, e) from e
    try:
        repo.ensure_version_dir(version)
        iohelper.write_file(release, dataproc.gzip_compress_bytes(raw))
    except OSError as e:
        raise RepositoryWriteError(release, e) from e
    return release


def _read_new_release(repo: Repository, version: str, platform: str) -> bytes:
    path = repo.release_path(version, platform)
    try:
        return dataproc.gzip_decompress_file(path)
    except FileNotFoundError as e:
        raise MissingReleaseArtifact(path) from e


def process_entry(repo: Repository, entry: VersionEntry, version: str, platform: str,
                  cancelled: threading.Event | None = None) -> EntryOutcome:
    if cancelled is not None and cancelled.is_set():
        return Cancelled(entry.name)

    log(f"Processing {entry.name}")
    if not entry.is_dir:
        outcome = NotADirectory(entry.name)
    elif entry.name == version:
        outcome = CurrentVersion(entry.name)
    elif not is_identifier(entry.name):
        # e.g. a stray directory with a backslash in its name, it can't hold a release
        outcome = NotAVersion(entry.name)
    elif not repo.has_release(entry.name, platform):
        # an old version that never shipped this platform
        outcome = NoRelease(entry.name)
    else:
        old = dataproc.gzip_decompress_file(repo.release_path(entry.name, platform))
        new = _read_new_release(repo, version, platform)
        patch = dataproc.bsdiff_generate_patch(old, new, entry.name, version, platform)
        patchfile = repo.patch_path(entry.name, version, platform)
        try:
            repo.ensure_patch_dir(entry.name, version)
            iohelper.write_file(patchfile, patch)
        except OSError as e:
            raise RepositoryWriteError(patchfile, e) from e
        outcome = PatchCreated(entry.name, patchfile, len(patch))

    log(outcome.describe())
    return outcome


def generate_patches(repo: Repository, version: str, platform: str, workers: int) -> list[EntryOutcome]:
    """Create a patch to ``version`` under every other version directory that has a release for ``platform``.

    Each job writes to its own ``<root>/<old>/<version>/`` directory, so jobs
    never share an output path and need no locking. The first failure stops
    further dispatch, queued jobs are cancelled and the error is re-raised once
    running jobs have finished.
    """
    cancelled = threading.Event()
    errors: list[BaseException] = []
    lock = threading.Lock()

    def future_callback(future: concurrent.futures.Future):
        if future.cancelled():
            return
        e = future.exception()
        if e is not None:
            with lock:
                errors.append(e)
            cancelled.set()

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix='makeupdate')
    futures: list[concurrent.futures.Future[EntryOutcome]] = []
    try:
        for entry in repo.list_version_entries():
            if cancelled.is_set():
                break
            future = executor.submit(process_entry, repo, entry, version, platform, cancelled)
            future.add_done_callback(future_callback)
            futures.append(future)
        done, _ = concurrent.futures.wait(futures, return_when=concurrent.futures.FIRST_EXCEPTION)
    except KeyboardInterrupt:
        cancelled.set()
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    except BaseException:
        cancelled.set()
        executor.shutdown(wait=True, cancel_futures=True)
        raise

    if cancelled.is_set() or any(not f.cancelled() and f.exception() is not None for f in done):
        cancelled.set()
        executor.shutdown(wait=True, cancel_futures=True)
        # callbacks of every started job have run once the pool is joined
        raise errors[0]

    executor.shutdown(wait=True)
    return [future.result() for future in futures]


def create_update(repo: Repository, source: os.PathLike, version: str, platform: str,
                  workers: int | None = None) -> PublishResult:
    """Publish ``source`` as ``version`` for ``platform``.

    Order matters: the release artifact is written first, then patches from
    every older version are generated, then the manifest is replaced. Any
    failure aborts the run; patches already written stay valid.
    """
    check_identifier("version", version)
    check_identifier("platform", platform)
    try:
        repo.ensure_root()
    except OSError as e:
        raise RepositoryWriteError(repo.root, e) from e

    release = publish_release(repo, source, version, platform)

    workers = worker_count(workers)
    log(f"Number of CPUs: {os.cpu_count()}")
    log(f"Number of workers: {workers}")
    outcomes = generate_patches(repo, version, platform, workers)

    manifest_path = repo.manifest_path(platform)
    _log_previous_manifest(manifest_path, platform)
    manifest.write_manifest(manifest_path, manifest.make_manifest(version, source))

    result = PublishResult(version, platform, release, manifest_path, outcomes)
    patches = result.patches()
    total = sum(x.size for x in patches)
    log(f"Published {version} for {platform}: {len(patches)} patches ({_format_size(total)}), "
        f"{len(outcomes) - len(patches)} entries skipped")
    return result
