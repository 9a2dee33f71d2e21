import logging
import os
import sys

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("entrypoint")

_COMMANDS: dict[str, list[str]] = {
  "api": ["uvicorn", "relay.main:app", "--host", "0.0.0.0", "--port", os.getenv("PORT", "3000"), "--no-server-header"],
  "worker": [sys.executable, "-m", "relay.worker"],
}


def main() -> None:
  """Launch the delivery API or the push worker while keeping migrations in the deploy pipeline."""
  role = (sys.argv[1] if len(sys.argv) > 1 else os.getenv("RELAY_ROLE", "worker")).strip().lower()
  args = _COMMANDS.get(role)
  if args is None:
    raise SystemExit(f"Unknown role {role!r}; expected one of: {', '.join(sorted(_COMMANDS))}.")

  logger.info("Starting %s (run alembic upgrade head in deploy pipeline)...", role)
  # Replace the current process so SIGTERM reaches the service directly.
  os.execvp(args[0], args)


if __name__ == "__main__":
  main()
