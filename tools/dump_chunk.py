"""Write one generated chunk as JSON, for diffing universes between versions."""
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from cosmos.engine.settings import UniverseSettings  # noqa: E402
from cosmos.world.chunks import ChunkManager  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("cx", type=int)
    parser.add_argument("cy", type=int)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", type=Path, default=None)
    args = parser.parse_args()

    settings = UniverseSettings.from_settings(ROOT / "settings.json")
    seed = settings.seed if args.seed is None else args.seed
    chunk = ChunkManager(seed, settings.generation).generate_chunk(args.cx, args.cy)
    payload = json.dumps(chunk.to_dict(), indent=2)
    if args.output is None:
        print(payload)
        return
    args.output.write_text(payload)
    print(f"Wrote chunk ({args.cx}, {args.cy}) of seed {seed} to {args.output}")


if __name__ == "__main__":
    main()
