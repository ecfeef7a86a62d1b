# music_organizer_api.py

import argparse
import filecmp
import html
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List

import crash_logger
from artist_conflicts import ConsolePrompter, OperationDeclined, Prompter, resolve_conflicts
from config import SINGLE_SUFFIX, SUPPORTED_EXTS, UNKNOWN_DIR_NAME, load_config
from controllers.scan_progress_controller import ScanProgressController
from library_model import LibraryIndex, Song, insert_song
from utils.audio_metadata_reader import Metadata, read_metadata
from utils.path_helpers import sanitize, same_path
from validator import InvalidMusicDirError, canonical_music_dir

logger = logging.getLogger(__name__)


# ─── A. INDEXING ────────────────────────────────────────────────────────

def is_music_file(fname: str) -> bool:
    return os.path.splitext(fname)[1].lower() in SUPPORTED_EXTS


def iter_music_files(root: str) -> Iterator[str]:
    """
    Yield every audio file under ``root`` in a stable (sorted) order.
    Hidden files and folders, symlinks and anything that isn't a regular
    file are skipped.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for fname in sorted(filenames):
            if fname.startswith(".") or not is_music_file(fname):
                continue
            full = os.path.join(dirpath, fname)
            if os.path.islink(full) or not os.path.isfile(full):
                continue
            yield full


def _read_or_empty(reader: Callable[[str], Metadata], path: str) -> Metadata:
    try:
        return reader(path)
    except Exception as e:  # a broken reader must not end the scan
        logger.warning("Tag reader failed on %s: %s", path, e)
        return Metadata()


def build_index(root, reader=read_metadata, progress=None) -> LibraryIndex:
    """
    Scan ``root`` and group every audio file into Artist → Album → Song.

    The artist a song is filed under is its album artist, else its track
    artist; songs with neither go to ``index.unknown``. Albums are keyed by
    their exact tag value, an empty album tag included.
    """
    index = LibraryIndex()
    for path in iter_music_files(root):
        meta = _read_or_empty(reader, path)
        song_index = len(index.songs)
        song = Song.from_metadata(path, meta)
        index.songs.append(song)
        if progress:
            progress.update(song_index + 1, None, f"{song.artists_str()} - {song.title}")

        artist_name = ", ".join(meta.release_artist_names() or [])
        if not artist_name:
            index.unknown.append(song_index)
            continue
        insert_song(index.artists, artist_name, song.release, song_index)

    logger.info(
        "Indexed %d songs: %d artists, %d without artist",
        len(index.songs), len(index.artists), len(index.unknown),
    )
    return index


# ─── B. PATH PLANNING ───────────────────────────────────────────────────

@dataclass
class MovePlan:
    """Destination for every indexed song, plus the folders that must exist."""

    output_root: str
    moves: Dict[str, str] = field(default_factory=dict)
    directories: List[str] = field(default_factory=list)
    collisions: Dict[str, List[str]] = field(default_factory=dict)

    def add_directory(self, path: str) -> None:
        if path not in self.directories:
            self.directories.append(path)

    def pending_moves(self) -> Dict[str, str]:
        """Moves whose source isn't already at its destination."""
        return {src: dest for src, dest in self.moves.items() if not same_path(src, dest)}


def is_single(album_name: str, title: str) -> bool:
    """An empty album, or one named ``"<title> - Single"``, is a single release."""
    return not album_name or album_name.lower() == f"{title.lower()}{SINGLE_SUFFIX}"


def song_filename(song: Song, single: bool, artist: str | None = None) -> str:
    """``Artist - Title.ext`` for singles, ``NN - Artist - Title.ext`` otherwise."""
    ext = os.path.splitext(song.path)[1]
    if artist is None:
        artist = song.credited_artist()
    name = f"{sanitize(artist)} - {sanitize(song.title)}{ext}"
    if single:
        return name
    return f"{song.track_number or 0:02d} - {name}"


def plan_moves(index: LibraryIndex, output_root: str) -> MovePlan:
    """
    Map every song of ``index`` to its destination under ``output_root``.
    Pure: reads nothing from and writes nothing to the filesystem.
    """
    plan = MovePlan(output_root)
    claimed: Dict[str, List[str]] = {}

    def claim(src: str, dest: str) -> None:
        plan.moves[src] = dest
        claimed.setdefault(dest, []).append(src)

    for artist in index.artists:
        artist_dir = os.path.join(output_root, sanitize(artist.name))
        plan.add_directory(artist_dir)
        for album in artist.albums:
            album_dir = os.path.join(artist_dir, sanitize(album.name))
            for si in album.songs:
                song = index.songs[si]
                credit = artist.credit_for(song)
                if is_single(album.name, song.title):
                    claim(song.path, os.path.join(artist_dir, song_filename(song, True, credit)))
                else:
                    plan.add_directory(album_dir)
                    claim(song.path, os.path.join(album_dir, song_filename(song, False, credit)))

    if index.unknown:
        unknown_dir = os.path.join(output_root, UNKNOWN_DIR_NAME)
        plan.add_directory(unknown_dir)
        for si in index.unknown:
            path = index.songs[si].path
            claim(path, os.path.join(unknown_dir, os.path.basename(path)))

    plan.collisions = {dest: srcs for dest, srcs in claimed.items() if len(srcs) > 1}
    for dest, srcs in plan.collisions.items():
        logger.warning("%d songs share the destination %s: %s", len(srcs), dest, ", ".join(srcs))
    return plan


# ─── C. RELOCATION ──────────────────────────────────────────────────────

def _ensure_directories(plan: MovePlan, summary: dict) -> None:
    for directory in [plan.output_root] + plan.directories:
        if os.path.isdir(directory):
            continue
        try:
            os.makedirs(directory, exist_ok=True)
            logger.info("created dir: %s", directory)
        except OSError as e:
            err = f"error creating dir: {directory}: {e}"
            summary["errors"].append(err)
            logger.error(err)


def apply_moves(plan: MovePlan, copy=False, progress=None) -> dict:
    """
    Create the planned folders, then move (or copy) each file to its
    destination. Files already in place are skipped; a failure on one file is
    recorded and the rest of the batch continues. An existing file at a
    destination is never overwritten: if it is identical to the source, a
    copy is skipped and a move just removes the source.
    Returns summary: {"moved", "copied", "skipped", "errors": [<error strings>]}.
    """
    summary = {"moved": 0, "copied": 0, "skipped": 0, "errors": []}
    verb = "copy" if copy else "move"
    doing = "copying" if copy else "moving"

    _ensure_directories(plan, summary)

    total = len(plan.moves)
    for idx, (src, dest) in enumerate(plan.moves.items(), start=1):
        if same_path(src, dest):
            summary["skipped"] += 1
            if progress:
                progress.update(idx, total, f"skipping {dest}")
            continue

        if progress:
            progress.update(idx, total, f"{doing} {dest}")

        try:
            if os.path.lexists(dest):
                if os.path.isfile(dest) and filecmp.cmp(src, dest, shallow=False):
                    if copy:
                        summary["skipped"] += 1
                        logger.info("Identical file already at %s; not copying %s", dest, src)
                    else:
                        os.remove(src)
                        summary["moved"] += 1
                        logger.info("Identical file already at %s; removed %s", dest, src)
                    continue
                raise FileExistsError(f"destination already exists: {dest}")
            if copy:
                shutil.copy2(src, dest)
                summary["copied"] += 1
            else:
                shutil.move(src, dest)
                summary["moved"] += 1
        except (OSError, shutil.Error) as e:
            err = f"Failed to {verb} {src} → {dest}: {e}"
            summary["errors"].append(err)
            logger.error(err)

    if progress:
        progress.finish()
    return summary


# ─── D. DRY-RUN PREVIEW ─────────────────────────────────────────────────

def build_dry_run_html(plan: MovePlan, output_html_path: str) -> str:
    """Write an HTML tree of the planned layout. Does NOT move any files."""
    root = plan.output_root
    songs = {os.path.relpath(dest, root) for dest in plan.moves.values()}
    tree_nodes = set()
    for rel in songs:
        parts = rel.split(os.sep)
        for i in range(1, len(parts) + 1):
            tree_nodes.add(os.path.join(*parts[:i]))

    title = html.escape(os.path.basename(root) or root)
    with open(output_html_path, "w", encoding="utf-8") as out:
        out.write(f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Music Organizer (Dry Run) – {title}</title>
  <style>
    body {{ background:#2e3440; color:#d8dee9; font-family:'Courier New', monospace; }}
    pre  {{ font-size:14px; }}
    .folder {{ color:#81a1c1; }}
    .song   {{ color:#a3be8c; }}
    .collision {{ color:#bf616a; }}
  </style>
</head>
<body>
<pre>
""")
        out.write(f"<span class=\"folder\">{title}/</span>\n\n")
        collisions = {os.path.relpath(dest, root) for dest in plan.collisions}
        for node in sorted(tree_nodes):
            depth = node.count(os.sep)
            indent = "    " * depth
            name = html.escape(os.path.basename(node))
            if node not in songs:
                out.write(f"{indent}<span class=\"folder\">{name}/</span>\n")
            elif node in collisions:
                out.write(f"{indent}<span class=\"collision\">- {name} (collision)</span>\n")
            else:
                out.write(f"{indent}<span class=\"song\">- {name}</span>\n")
        out.write("</pre>\n</body>\n</html>\n")

    logger.info("Dry-run HTML written to: %s", output_html_path)
    return output_html_path


# ─── E. HIGH-LEVEL "ORGANIZE" ───────────────────────────────────────────

def organize(
    music_dir,
    output_dir=None,
    *,
    copy=False,
    assume_yes=False,
    verbose=False,
    dry_run=False,
    preview_html=None,
    prompter: Prompter | None = None,
    reader=read_metadata,
    progress=None,
    log_callback=None,
):
    """
    1) Validate ``music_dir`` (raises InvalidMusicDirError).
    2) Index it and let the operator resolve similar artist names.
    3) Plan destinations under ``output_dir`` (defaults to ``music_dir``).
    4) Unless ``dry_run``, confirm (raises OperationDeclined on "no") and
       move or copy the files.
    Returns summary: {"songs", "unknown", "merged", "collisions", "moved",
    "copied", "skipped", "errors", "html", "dry_run"}.
    """
    if log_callback is None:
        def log_callback(msg):
            print(msg)

    root = canonical_music_dir(music_dir)
    output_root = os.path.realpath(output_dir) if output_dir else root
    if prompter is None:
        prompter = ConsolePrompter()
    if progress is None:
        progress = ScanProgressController(verbose=verbose)

    log_callback("indexing...")
    index = build_index(root, reader=reader, progress=progress)
    progress.finish()

    log_callback("checking songs")
    resolution = resolve_conflicts(index.artists, prompter)
    index.assert_partition()

    plan = plan_moves(index, output_root)
    summary = {
        "songs": len(index.songs),
        "unknown": len(index.unknown),
        "merged": resolution.merged,
        "collisions": len(plan.collisions),
        "moved": 0,
        "copied": 0,
        "skipped": 0,
        "errors": [],
        "html": None,
        "dry_run": dry_run,
    }
    if preview_html:
        summary["html"] = build_dry_run_html(plan, preview_html)

    if dry_run:
        for src, dest in plan.pending_moves().items():
            log_callback(f"{src} → {dest}")
        log_callback(f"{len(plan.pending_moves())} of {len(plan.moves)} files would be {'copied' if copy else 'moved'}")
        return summary

    if not assume_yes:
        ok = prompter.confirm(
            f"{len(plan.moves)} files will be {'copied' if copy else 'moved'}. Continue"
        )
        if not ok:
            raise OperationDeclined("operator declined")

    log_callback("writing...")
    summary.update(apply_moves(plan, copy=copy, progress=progress))
    log_callback("done")
    return summary


# ─── F. CLI ─────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="music_organizer",
        description="Moves or copies and renames music files using their metadata information.",
    )
    parser.add_argument("-m", "--music-dir", required=True, help="the directory which will be searched for music files")
    parser.add_argument("-o", "--output-dir", help="the directory which the content will be written to")
    parser.add_argument("-c", "--copy", action="store_true", help="copy the files instead of moving (requires --output-dir)")
    parser.add_argument("-y", "--assume-yes", action="store_true", help="assume yes as an answer for the final confirmation")
    parser.add_argument("-v", "--verbose", action="store_true", help="print one line per file instead of a status line")
    parser.add_argument("--dry-run", action="store_true", help="only show what would happen")
    parser.add_argument("--preview-html", metavar="PATH", help="write an HTML preview of the planned layout")
    parser.add_argument("--log-file", metavar="PATH", help="also write a rotating log file")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--config", metavar="PATH", help="JSON config file with default options")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    copy = args.copy or bool(cfg.get("copy"))
    if copy and not args.output_dir:
        parser.error("--copy requires --output-dir")

    crash_logger.install(args.log_file or cfg.get("log_file"))
    crash_logger.add_context_provider(
        lambda: {"music_dir": args.music_dir, "output_dir": args.output_dir, "copy": copy}
    )
    if args.debug:
        crash_logger.toggle_debug_mode()

    try:
        summary = organize(
            args.music_dir,
            args.output_dir,
            copy=copy,
            assume_yes=args.assume_yes or bool(cfg.get("assume_yes")),
            verbose=args.verbose or bool(cfg.get("verbose")),
            dry_run=args.dry_run,
            preview_html=args.preview_html,
        )
    except InvalidMusicDirError as e:
        print(e)
        return 1
    except OperationDeclined:
        print("exiting...")
        return 1

    if summary["errors"]:
        print(f"{len(summary['errors'])} files could not be {'copied' if copy else 'moved'}:")
        for err in summary["errors"]:
            print(f"  ! {err}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
