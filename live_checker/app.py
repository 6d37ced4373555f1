"""Typer CLI entrypoint for live-checker."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import CheckerConfig, ConfigRepository, SchedulingMode
from .engine import ProgressSnapshot, ResultExporter
from .logging_conf import configure_logging, tail_log
from .runner import CheckRunner, InputValidationError
from .ui import ProgressReporter

app = typer.Typer(
    help="账号存活批量检测命令行工具",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="检测配置管理命令",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="日志查看命令",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    make_runner: Callable[[CheckerConfig], CheckRunner]


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    logger = configure_logging(verbose=verbose)
    return AppState(
        repository=repository,
        make_runner=lambda config: CheckRunner(config, logger=logger.bind(component="runner")),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


# 进度条策略：默认在交互式终端显示，非TTY自动降级为静默
def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stdout, "isatty", lambda: False)())


def _read_input(source: Optional[Path]) -> str:
    if source is None or str(source) == "-":
        return typer.get_binary_stream("stdin").read().decode("utf-8", errors="ignore")
    if not source.exists():
        raise typer.BadParameter(f"文件不存在：{source}")
    return source.read_text(encoding="utf-8", errors="ignore")


def _render_summary_table(snapshot: ProgressSnapshot, show_errors: bool) -> Table:
    table = Table(title="检测结果", box=box.SIMPLE_HEAD)
    table.add_column("指标", style="cyan")
    table.add_column("数量", style="green", justify="right")
    table.add_row("进度", f"{snapshot.processed} / {snapshot.total}")
    table.add_row("有效", str(len(snapshot.live)))
    table.add_row("无效", str(len(snapshot.dead)))
    if show_errors:
        table.add_row("错误", str(len(snapshot.errors)))
    return table


def _print_ids(title: str, ids: tuple[str, ...], style: str) -> None:
    console.print(f"{title}（{len(ids)}）", style=f"bold {style}")
    if ids:
        console.print("\n".join(ids), highlight=False)
    else:
        console.print("（无）", style="dim")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="开启调试日志")
) -> None:
    ctx.obj = build_state(verbose)


@app.command("check", help="从文件或标准输入读取账号并批量检测存活状态。")
def check(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(None, help="包含账号的文本文件，省略或 '-' 时读取标准输入。"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="并发检测数量。"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="头像接口基础地址。"),
    mode: Optional[SchedulingMode] = typer.Option(None, "--mode", help="调度方式：chunked 或 pool。"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="单次请求超时（秒）。"),
    report_errors: bool = typer.Option(
        False, "--report-errors", help="将网络失败单独列为错误，而不是计入无效。"
    ),
    export: bool = typer.Option(False, "--export", help="将结果写入 outputs 目录。"),
    quiet: bool = typer.Option(False, "--quiet", help="只输出精简结果。"),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.repository.load_config().with_overrides(
            concurrency_bound=concurrency,
            remote_endpoint_base=endpoint,
            scheduling=mode,
            request_timeout=timeout,
            report_errors=True if report_errors else None,
        )
    except ValidationError as exc:
        console.print(f"配置无效：{exc}", style="red", markup=False)
        raise typer.Exit(code=2)

    runner = state.make_runner(config)
    try:
        prepared = runner.prepare(_read_input(source))
    except InputValidationError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1)

    if prepared.dropped_lines:
        console.print(
            f"最多支持 {config.max_ids} 个 ID，已自动截断（忽略 {prepared.dropped_lines} 行）",
            style="yellow",
        )
    if not quiet:
        console.print(f"正在检测 {len(prepared.ids)} 个账号", style="cyan")

    progress_flag = config.enable_progress_bar and _progress_default_enabled() and not quiet
    reporter = ProgressReporter(enabled=progress_flag)
    reporter.start(len(prepared.ids))
    try:
        snapshot = runner.run(prepared, on_progress=reporter.update)
    finally:
        reporter.close()

    if not snapshot.finished:
        console.print(f"检测已中断，已完成 {snapshot.processed}/{snapshot.total}", style="yellow")

    if quiet:
        message = f"检测完成：有效 {len(snapshot.live)}，无效 {len(snapshot.dead)}"
        if config.report_errors:
            message += f"，错误 {len(snapshot.errors)}"
        console.print(message)
    else:
        console.print(_render_summary_table(snapshot, config.report_errors))
        _print_ids("有效账号", snapshot.live, "green")
        _print_ids("无效账号", snapshot.dead, "red")
        if config.report_errors:
            _print_ids("检测失败", snapshot.errors, "yellow")
        console.print(f"检测完成，找到 {len(snapshot.live)} 个有效账号", style="green")

    if export:
        exporter = ResultExporter(state.repository.outputs_dir(config))
        for path in exporter.export(snapshot):
            console.print(f"已写入 {path}", style="dim")


@config_app.command("show", help="查看当前检测配置。")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load_config()
    table = Table(title="检测配置", box=box.SIMPLE_HEAD)
    table.add_column("配置项", style="cyan", no_wrap=True)
    table.add_column("值", style="green", overflow="fold")
    for key, value in config.model_dump(mode="json").items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)
    console.print(f"配置文件：{state.repository.locator.config_path()}", style="dim")


@config_app.command("set", help="修改单个配置项。")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="配置项名称。"),
    value: str = typer.Argument(..., help="新的取值，留空字符串表示清除。"),
) -> None:
    state = _get_state(ctx)
    if key not in CheckerConfig.model_fields:
        console.print(f"未知配置项 `{key}`。", style="red")
        raise typer.Exit(code=1)
    try:
        config = state.repository.update_config(**{key: value})
    except ValidationError as exc:
        console.print(f"配置无效：{exc}", style="red", markup=False)
        raise typer.Exit(code=2)
    current = config.model_dump(mode="json")[key]
    console.print(f"已更新 `{key}` = {current}", style="green")


@config_app.command("reset", help="恢复默认配置。")
def config_reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="跳过确认提示。"),
) -> None:
    state = _get_state(ctx)
    if not yes and not typer.confirm("确认恢复默认配置？"):
        raise typer.Exit(code=0)
    state.repository.reset_config()
    console.print("已恢复默认配置。", style="green")


@log_app.command("show", help="查看日志的最近内容。")
def log_show(
    ctx: typer.Context,
    errors: bool = typer.Option(False, "--errors", help="查看错误日志。"),
    tail: int = typer.Option(100, "--tail", min=1, help="显示最近 N 行内容。"),
) -> None:
    state = _get_state(ctx)
    name = "error.log" if errors else "checker.log"
    lines = tail_log(state.repository.locator.logs_dir / name, tail)
    if not lines:
        console.print("暂无日志信息，请稍后再试。", style="dim")
        return
    console.print(f"{name} · 最近 {len(lines)} 行", style="cyan")
    console.print("".join(lines), highlight=False, markup=False)


app.add_typer(config_app, name="config", help="查看或修改检测配置")
app.add_typer(log_app, name="log", help="查看日志文件")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
