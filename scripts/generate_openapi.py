#!/usr/bin/env python3
"""Generate the OpenAPI spec from the FastAPI application.

Usage:
    python scripts/generate_openapi.py [OUTPUT]

Outputs to: docs/api.yaml by default
"""

import sys
from pathlib import Path

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import os  # noqa: E402

import yaml  # noqa: E402

# Testing environment skips DB initialization
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_URL", "postgresql+asyncpg://x:x@localhost/x")

from src import __version__  # noqa: E402
from src.api.main import create_app  # noqa: E402

DEFAULT_OUTPUT = Path("docs/api.yaml")


def main() -> None:
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_OUTPUT
    schema = create_app().openapi()

    schema["info"] = {
        "title": "House Planner API",
        "description": (
            "Smart home device catalog and house planner.\n\n"
            "Devices are grouped into the collections sensors, switches, lighting, "
            "other_devices, voice_assistants and gateways. Rooms on floors hold device "
            "placements; the planner endpoints aggregate them into the shopping list, "
            "gateway coverage and connectivity topology.\n\n"
            "`GET /api/v1/stream?collections=...` streams full collection snapshots "
            "as Server-Sent Events.\n"
        ),
        "version": __version__,
    }

    schema["servers"] = [
        {"url": "http://localhost:8000", "description": "Local development"},
    ]

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        yaml.dump(
            schema,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=120,
        )

    path_count = len(schema["paths"])
    schema_count = len(schema.get("components", {}).get("schemas", {}))
    print(f"✅ OpenAPI spec written to {output}")
    print(f"   {path_count} paths, {schema_count} schemas")


if __name__ == "__main__":
    main()
