"""Tests for the confirmation gate."""

import asyncio
import io
import os
import queue
import signal
import subprocess
import sys
import threading
import time
from pathlib import Path

import pytest
from rich.console import Console

from fixloop.ui.confirm import ConfirmationGate
from fixloop.ui.display import DisplaySink


def _gate(prompt_fn) -> tuple[ConfirmationGate, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=80, color_system=None)
    return ConfirmationGate(console=console, prompt_fn=prompt_fn), buffer


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("y", True),
        ("yes", True),
        (" YES \n", True),
        ("Y", True),
        ("", False),
        ("n", False),
        ("no", False),
        ("yep", False),
    ],
)
def test_only_explicit_yes_accepts(answer, expected):
    gate, _ = _gate(lambda prompt: answer)
    assert asyncio.run(gate.confirm("a.py", "old\n", "new\n")) is expected


def test_eof_declines():
    def prompt_fn(prompt):
        raise EOFError

    gate, _ = _gate(prompt_fn)
    assert asyncio.run(gate.confirm("a.py", "old\n", "new\n")) is False


def test_shows_path_and_diff():
    gate, buffer = _gate(lambda prompt: "n")

    asyncio.run(gate.confirm("src/app.py", "value = 1\n", "value = 2\n"))

    output = buffer.getvalue()
    assert "src/app.py" in output
    assert "-value = 1" in output
    assert "+value = 2" in output


def test_prompts_never_overlap():
    lock = threading.Lock()
    active = 0
    peak = 0

    def prompt_fn(prompt):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with lock:
            active -= 1
        return "y"

    gate, _ = _gate(prompt_fn)

    async def scenario():
        return await asyncio.gather(*(gate.confirm(f"f{i}.py", "a\n", "b\n") for i in range(4)))

    assert asyncio.run(scenario()) == [True, True, True, True]
    assert peak == 1


def test_display_output_waits_until_the_prompt_is_answered():
    buffer = io.StringIO()
    console = Console(file=buffer, width=80, color_system=None)
    sink = DisplaySink(console=console)
    seen_at_prompt: list[str] = []

    def prompt_fn(prompt):
        time.sleep(0.1)
        seen_at_prompt.append(buffer.getvalue())
        return "y"

    gate = ConfirmationGate(console=console, prompt_fn=prompt_fn, display=sink)

    async def other_file_fails():
        await asyncio.sleep(0.02)
        sink.append_output("Failed to fix b.py: disk gone\n")

    async def scenario():
        return await asyncio.gather(gate.confirm("a.py", "old\n", "new\n"), other_file_fails())

    confirmed, _ = asyncio.run(scenario())

    assert confirmed is True
    assert "+new" in seen_at_prompt[0]
    assert "Failed to fix b.py" not in seen_at_prompt[0]
    assert buffer.getvalue().endswith("Failed to fix b.py: disk gone\n")


CHILD_SCRIPT = """
import sys
import threading

import fixloop.cli.main as cli
from fixloop.ui.confirm import ConfirmationGate


def prompt_fn(prompt):
    print("awaiting answer", flush=True)
    # A read that never returns
    threading.Event().wait()


async def run_pipeline(config, display):
    gate = ConfirmationGate(console=display.console, prompt_fn=prompt_fn, display=display)
    await gate.confirm("a.py", "old\\n", "new\\n")
    return {}


cli.run_pipeline = run_pipeline
sys.exit(cli.main(["--hide-ui", "--fix", "pytest"]))
"""


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
def test_interrupt_during_prompt_exits(tmp_path):
    script = tmp_path / "child.py"
    script.write_text(CHILD_SCRIPT)
    env = dict(os.environ)
    env.update({
        "PYTHONPATH": str(Path(__file__).resolve().parents[1] / "src"),
        "DEEPSEEK_API_KEY": "ds-key",
        "FIREWORKS_AI_API_KEY": "fw-key",
    })
    proc = subprocess.Popen(
        [sys.executable, "-u", str(script)],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=tmp_path,
        env=env,
        text=True,
    )
    lines: queue.Queue[str] = queue.Queue()
    threading.Thread(target=lambda: [lines.put(line) for line in proc.stdout], daemon=True).start()

    try:
        deadline = time.monotonic() + 10
        while True:
            line = lines.get(timeout=max(deadline - time.monotonic(), 0.01))
            if "awaiting answer" in line:
                break

        proc.send_signal(signal.SIGINT)
        returncode = proc.wait(timeout=10)
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    assert returncode == 130
    assert "Interrupted." in proc.stderr.read()
