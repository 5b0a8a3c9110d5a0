from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from chordsheet.logging_utils import configure_logging, log_event
from chordsheet.services.song_preview import build_preview

logger = logging.getLogger("chordsheet.import_previews")


def build_preview_records(songs: list[dict]) -> list[dict]:
    records: list[dict] = []
    for song in songs:
        preview = build_preview(song.get("markdown") or "")
        records.append(
            {
                "id": song.get("id"),
                "title": song.get("title"),
                **preview.model_dump(mode="json"),
            }
        )
    return records


def import_previews(input_path: Path, output_path: Path) -> list[dict]:
    songs = json.loads(input_path.read_text(encoding="utf-8"))
    if not isinstance(songs, list):
        raise ValueError(f"{input_path} must contain a JSON list of song records.")

    log_event(logger, "preview_import_started", input_path=str(input_path), song_count=len(songs))
    records = build_preview_records(songs)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    flagged = sum(1 for record in records if record["warnings"])
    log_event(
        logger,
        "preview_import_completed",
        output_path=str(output_path),
        song_count=len(records),
        flagged_count=flagged,
    )
    return records


def main() -> None:
    parser = argparse.ArgumentParser(description="Pre-render chord sheet previews for a batch of songs.")
    parser.add_argument("input", type=Path, help="JSON list of {id, title, markdown} song records")
    parser.add_argument("--output", type=Path, default=Path("artifacts/previews.json"))
    args = parser.parse_args()

    configure_logging()
    import_previews(args.input, args.output)


if __name__ == "__main__":
    main()
