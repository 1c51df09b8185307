# lc3_tracer/cli.py
"""
コマンドラインのエントリポイント。

    lc3-tracer run IMAGE [--origin ADDR] [--config FILE] [--max-steps N] [--break ADDR ...] [--trace | -q]
    lc3-tracer gui [--config FILE]

プログラムの出力は標準出力に、診断ログは標準エラー出力に書き出します。
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lc3_tracer.arch.lc3.cpu import Lc3Cpu
from lc3_tracer.config.builder import SystemBuilder
from lc3_tracer.config.loader import ConfigLoader
from lc3_tracer.config.models import ProgramImage, SystemConfig
from lc3_tracer.core.outcome import RunOutcome, RunStatus
from lc3_tracer.debugger.debugger import Debugger, BreakpointCondition, BreakpointConditionType
from lc3_tracer.loader.loader import parse_object_image
from lc3_tracer.transport.console import StreamConsoleInput, StreamConsoleOutput

logger = logging.getLogger("lc3_tracer")

# @intent:constant 終了コード。
EXIT_HALTED = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_STOPPED = 3

def _parse_address(text: str) -> int:
    value = text.strip()
    try:
        if value.lower().startswith("0x"):
            address = int(value, 16)
        elif value[:1] in ("x", "X"):
            address = int(value[1:], 16)
        else:
            address = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: {text}") from None
    if not 0 <= address <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"address out of range: {text}")
    return address

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lc3-tracer", description="LC-3 emulator and instruction tracer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a program image until HALT")
    run_parser.add_argument("image", nargs="?", help="Program image (.obj or .hex)")
    run_parser.add_argument("--origin", type=_parse_address,
                            help="Load a raw big-endian word image (.bin) at this address")
    run_parser.add_argument("--config", help="YAML system config")
    run_parser.add_argument("--symbols", help="Symbol file (.sym) used in the trace")
    run_parser.add_argument("--max-steps", type=int, help="Stop after N instructions")
    run_parser.add_argument("--break", dest="breakpoints", type=_parse_address, action="append", default=[],
                            metavar="ADDR", help="Stop when PC reaches ADDR (repeatable)")
    verbosity = run_parser.add_mutually_exclusive_group()
    verbosity.add_argument("--trace", action="store_true", help="Log every executed instruction")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    gui_parser = subparsers.add_parser("gui", help="Open the tracer window")
    gui_parser.add_argument("--config", help="YAML system config")
    return parser

# @intent:responsibility ログの出力先とレベルを設定します。プログラムの出力と混ざらないよう標準エラー出力を使います。
def setup_logging(trace: bool = False, quiet: bool = False) -> None:
    if trace:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

# @intent:responsibility 引数と設定ファイルからSystemConfigを組み立てます。
def _build_config(args: argparse.Namespace) -> SystemConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    if args.image:
        if args.origin is not None:
            # 生のワードイメージ（オリジンワードなし）
            data = Path(args.image).read_bytes()
            _, words = parse_object_image(args.origin.to_bytes(2, "big") + data)
            config.programs.append(ProgramImage(origin=args.origin, words=words, symbols=args.symbols))
        else:
            config.programs.append(ProgramImage(path=args.image, symbols=args.symbols))
    if not config.programs:
        raise ValueError("No program image given (pass IMAGE or --config).")
    return config

def _exit_code(outcome: RunOutcome) -> int:
    if outcome.status is RunStatus.HALTED:
        return EXIT_HALTED
    if outcome.status is RunStatus.FATAL:
        return EXIT_FATAL
    return EXIT_STOPPED

def _dump_registers(cpu: Lc3Cpu) -> None:
    registers = cpu.get_register_map()
    logger.info(" ".join(f"{name}=x{value:04X}" for name, value in registers.items()))

def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = _build_config(args)
        cpu, _ = SystemBuilder().build_system(
            config,
            console_input=StreamConsoleInput(sys.stdin.buffer),
            console_output=StreamConsoleOutput(sys.stdout),
        )
    except (OSError, ValueError) as e:
        logger.error("Failed to load program: %s", e)
        return EXIT_USAGE

    debugger = Debugger(cpu, history_limit=1)
    for address in args.breakpoints:
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=address))

    max_steps = args.max_steps if args.max_steps is not None else config.run.max_steps
    outcome = debugger.run(max_steps=max_steps)
    if outcome.status is RunStatus.FATAL:
        _dump_registers(cpu)
    elif outcome.status is RunStatus.STOPPED:
        logger.info("Stopped: %s", outcome.reason)
        _dump_registers(cpu)
    return _exit_code(outcome)

def cmd_gui(args: argparse.Namespace) -> int:
    # PySide6はGUI起動時にのみ読み込む
    from lc3_tracer.ui.app import main as gui_main
    return gui_main(args.config)

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run":
        setup_logging(trace=args.trace, quiet=args.quiet)
        return cmd_run(args)
    setup_logging()
    return cmd_gui(args)

if __name__ == "__main__":
    sys.exit(main())
