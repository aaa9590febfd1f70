#!/usr/bin/env python3
"""
Quick demonstration of decopy functionality.

This script creates a sample build directory and copies it to several
backup destinations, first through the library API with plain callbacks and
then through the full terminal UI.
"""

import sys
import tempfile
import time
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from decopy import CLIProcessor, CopyConfig, CopyQueue, format_bytes, setup_logging


def create_demo_tree(root: Path) -> Path:
    """
    Create a small website build to copy.

    Parameters
    ----------
    root : Path
        Directory to create the build in

    Returns
    -------
    Path
        The build directory
    """
    build = root / "site-build"
    files = [
        ("index.html", "<html><body>Demo</body></html>\n" * 200),
        ("assets/app.js", "console.log('demo');\n" * 5000),
        ("assets/style.css", "body { margin: 0; }\n" * 3000),
        ("images/logo.svg", "<svg></svg>\n" * 1000),
        ("robots.txt", "User-agent: *\n"),
    ]
    for name, content in files:
        path = build / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    print(f"📁 Created demo build: {build}")
    return build


def demo_library_copy(root: Path, build: Path) -> None:
    """Copy with callbacks only, no terminal UI."""
    print("\n" + "=" * 50)
    print("🚀 DEMO: CopyQueue with callbacks")
    print("=" * 50)

    queue = CopyQueue(build, [root / "lib-backup-1", root / "lib-backup-2"])
    last_shown = {}

    def on_progress(percentage, bytes_copied, destination):
        if percentage - last_shown.get(destination, -25) >= 25 or percentage == 100:
            last_shown[destination] = percentage
            print(f"  {percentage:>3}% {format_bytes(bytes_copied)} --> {destination}")

    def on_complete(summary):
        print(f"✅ {len(summary.succeeded)} of {len(summary.destinations)} destinations copied")

    start_time = time.time()
    queue.start_copy(on_progress, on_complete, buffer_size=16 * 1024)
    print(f"⏱️  Finished in {time.time() - start_time:.2f} seconds")


def demo_terminal_ui(root: Path, build: Path) -> None:
    """Run the full boxed UI without the confirmation prompt."""
    print("\n" + "=" * 50)
    print("📺 DEMO: Terminal UI")
    print("=" * 50)
    time.sleep(1)

    queue = CopyQueue(build, [root / "usb-a", root / "usb-b", root / "archive"])
    processor = CLIProcessor(queue, CopyConfig(buffer_size=16 * 1024, assume_yes=True))
    exit_code = processor.run()
    print(f"Exit code: {int(exit_code)}")


def main() -> None:
    """Run all demonstrations."""
    print("🎬 decopy - Deployment Copy Demo")
    print("=" * 60)

    setup_logging(verbose=True)

    try:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            build = create_demo_tree(root)
            demo_library_copy(root, build)
            demo_terminal_ui(root, build)

    except KeyboardInterrupt:
        print("\n\n⏹️  Demo interrupted by user")


if __name__ == "__main__":
    main()
