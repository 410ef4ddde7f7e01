#!/usr/bin/env python3
"""
Test runner script for local development
"""
import subprocess
import sys
import os

def main():
    """Run the test suite and an import smoke check"""

    # Quiet, offline-friendly settings for tests
    os.environ["LOG_LEVEL"] = "ERROR"
    os.environ["CONTENT_SOURCE"] = "markdown"

    commands = [
        ["uv", "run", "pytest", "tests/", "-v", "--tb=short"],
        ["uv", "run", "python", "-c", "from sitefront.main import app; print('App imports successfully')"],
    ]

    print("Running test suite...")

    for i, cmd in enumerate(commands, 1):
        print(f"\nStep {i}/{len(commands)}: {' '.join(cmd[2:])}")

        try:
            subprocess.run(cmd, check=True, capture_output=False)
        except subprocess.CalledProcessError as e:
            print(f"Test failed with exit code {e.returncode}")
            sys.exit(e.returncode)

    print("\nAll tests passed successfully!")

if __name__ == "__main__":
    main()
