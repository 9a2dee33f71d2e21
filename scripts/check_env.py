"""Validate a dotenv file against the runtime env contract before deploying.

How/Why:
- Catch missing DSN or Firebase credentials before a worker is rolled out.
- Reuse the same registry the processes enforce at startup.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
  sys.path.insert(0, str(REPO_ROOT))


def main() -> int:
  parser = argparse.ArgumentParser(description="Validate env values for the relay worker or delivery API.")
  parser.add_argument("--env-file", default=str(REPO_ROOT / ".env"), help="Path to the dotenv file to validate.")
  parser.add_argument("--target", choices=["worker", "api", "both"], default="both", help="Which process contract to check.")
  args = parser.parse_args()

  from relay.core.env_contract import REQUIRED_ENV_REGISTRY, list_required_env_names, validate_env_values
  from relay.utils.env import read_env_file

  env_file = Path(args.env_file).resolve()
  if not env_file.is_file():
    raise RuntimeError(f"Env file not found: {env_file}")

  env_values = read_env_file(env_file)
  # Fold fallback names onto their primary key the same way startup resolution does.
  for definition in REQUIRED_ENV_REGISTRY:
    if env_values.get(definition.name, "").strip():
      continue
    for fallback in definition.fallbacks:
      if env_values.get(fallback, "").strip():
        env_values[definition.name] = env_values[fallback]
        break

  targets = ["worker", "api"] if args.target == "both" else [args.target]
  errors: list[str] = []
  for target in targets:
    print(f"INFO target={target} required={', '.join(list_required_env_names(target=target))}")
    errors.extend(validate_env_values(target=target, env_map=env_values))

  if errors:
    print("Contract validation failed:\n- " + "\n- ".join(sorted(set(errors))))
    return 1

  print("OK")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
