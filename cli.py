import json
import sys
from pathlib import Path

from almanac.services.errors import InvalidInputError
from almanac.services.gates import TaskDescriptor, evaluate_task
from almanac.services.lunar import LunarOverride


def check(data: dict) -> dict:
    """Evaluate one task document: ``{"task": {...}, "at": ..., "override": {...}}``."""

    task = TaskDescriptor(**data["task"])
    override = LunarOverride(**data["override"]) if data.get("override") else None
    evaluation = evaluate_task(task, at=data.get("at"), override=override, gates=data.get("gates"))
    return {
        "lunar": evaluation.lunar.as_dict(),
        "movement": evaluation.movement.as_dict(),
        "results": [r.as_dict() for r in evaluation.results],
        "blocked": evaluation.blocked,
    }


def main() -> None:
    in_path = Path(sys.argv[1])
    out_path = Path(sys.argv[2])
    data = json.loads(in_path.read_text(encoding="utf-8"))
    try:
        output = check(data)
    except InvalidInputError as exc:
        print(f"Invalid input: {exc}")
        sys.exit(2)
    out_path.write_text(json.dumps(output, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote gate results → {out_path}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python cli.py input.json output.json")
        sys.exit(1)
    main()
