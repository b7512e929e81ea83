"""
Export the API's OpenAPI schema as JSON and YAML.

Writes ``openapi.json`` and ``openapi.yaml`` into the output directory
(``docs/api`` at the repository root by default) and prints a short
summary of what was exported.

Usage:
    python scripts/export_openapi.py [--output-dir DIR]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, Tuple

import yaml

# Add backend directory to path
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

DEFAULT_OUTPUT_DIR = backend_dir.parent / "docs" / "api"


def export_openapi(output_dir: Path = DEFAULT_OUTPUT_DIR) -> Tuple[Path, Path, Dict]:
    """
    Render the schema of ``newsroom.main.app`` to disk.

    Returns:
        (json path, yaml path, schema dict)
    """
    # Importing the app registers every router
    from newsroom.main import app

    schema = app.openapi()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / "openapi.json"
    yaml_path = output_dir / "openapi.yaml"

    with open(json_path, "w") as f:
        json.dump(schema, f, indent=2)
    with open(yaml_path, "w") as f:
        yaml.safe_dump(schema, f, default_flow_style=False, sort_keys=False)

    return json_path, yaml_path, schema


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    args = parser.parse_args()

    json_path, yaml_path, schema = export_openapi(args.output_dir)
    print(f"OpenAPI JSON exported to: {json_path}")
    print(f"OpenAPI YAML exported to: {yaml_path}")
    print("\nAPI Summary:")
    print(f"  Title: {schema['info']['title']}")
    print(f"  Version: {schema['info']['version']}")
    print(f"  Endpoints: {len(schema['paths'])}")
    print(f"  Schemas: {len(schema.get('components', {}).get('schemas', {}))}")


if __name__ == "__main__":
    main()
