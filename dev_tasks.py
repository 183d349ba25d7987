#!/usr/bin/env python3
"""
Development tasks for berrybind.

Named dev_tasks.py so it does not shadow the PyPA `build` module.
"""

import os
import shutil
import subprocess
import sys

SOURCES = "berrybind tests examples"


def run_command(command, check=True):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", ".mypy_cache", "htmlcov", ".coverage"]:
        if os.path.isdir(path):
            shutil.rmtree(path, ignore_errors=True)
        elif os.path.exists(path):
            os.remove(path)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    run_command(f"black {SOURCES}")
    run_command(f"isort {SOURCES}")


def lint():
    results = [
        run_command("mypy berrybind", check=False),
        run_command(f"flake8 {SOURCES}", check=False),
    ]
    if not all(results):
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    # Extra pytest args pass through: python dev_tasks.py test -k bind
    extra = " ".join(sys.argv[2:])
    ok = run_command(f"pytest tests/ -v --cov=berrybind --cov-report=term-missing {extra}".strip(), check=False)
    if not ok:
        sys.exit(1)


def playground():
    run_command("uvicorn examples.main:app --reload --port 8000")


def build():
    clean()
    run_command("python -m build")
    run_command("python -m twine check dist/*")


def install_dev():
    run_command("pip install -e .[dev,test,examples]")


COMMANDS = {
    "clean": clean,
    "format": format_code,
    "lint": lint,
    "test": test,
    "playground": playground,
    "build": build,
    "install-dev": install_dev,
    "all": lambda: (format_code(), lint(), test(), build()),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print("Usage: python dev_tasks.py <command>")
        print("Commands: " + ", ".join(COMMANDS))
        sys.exit(1)
    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
