#!/usr/bin/env python3
"""Validate fleet YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def check_references(data: dict) -> list[str]:
    """Check ids the schema cannot: unique ids/plates and dangling references."""
    errors = []
    depot_ids = [d["id"] for d in data.get("depots") or []]
    vehicle_ids = [v["id"] for v in data.get("vehicles") or []]
    plates = [str(v["plate"]).upper() for v in data.get("vehicles") or []]
    record_ids = [r["id"] for r in data.get("records") or [] if "id" in r]

    for label, values in (
        ("depot id", depot_ids),
        ("vehicle id", vehicle_ids),
        ("plate", plates),
        ("record id", record_ids),
    ):
        duplicates = sorted({str(v) for v in values if values.count(v) > 1})
        if duplicates:
            errors.append(f"Duplicate {label}: {', '.join(duplicates)}")

    for vehicle in data.get("vehicles") or []:
        if vehicle.get("depotId") is not None and vehicle["depotId"] not in depot_ids:
            errors.append(f"Vehicle {vehicle['id']} references unknown depot {vehicle['depotId']}")
    for record in data.get("records") or []:
        if record["vehicleId"] not in vehicle_ids:
            errors.append(f"Record {record.get('id')} references unknown vehicle {record['vehicleId']}")
        end = record.get("endDate")
        if end is not None and str(end) < str(record["startDate"]):
            errors.append(f"Record {record.get('id')} ends before it starts")
    return errors


def validate_fleet_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single fleet YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
        errors.extend(check_references(data))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def main():
    """Validate all fleet YAML files in the fleets/ directory."""
    schema = load_schema()
    fleets_dir = Path(__file__).parent / "fleets"

    if not fleets_dir.exists():
        print(f"Error: fleets directory not found: {fleets_dir}")
        return 1

    yaml_files = list(fleets_dir.glob("*.yaml")) + list(fleets_dir.glob("*.yml"))

    if not yaml_files:
        print(f"Warning: No YAML files found in {fleets_dir}")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_fleet_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
