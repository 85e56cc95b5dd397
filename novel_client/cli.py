"""
命令列介面

即時進度輸出到stderr，最終結果以JSON輸出到stdout；
失敗時以非零代碼結束，Ctrl-C 會中止目前的串流會話。
"""

import logging
import threading

import click

from .models import (
    ClientConfig, AIOverride, GenerationKind, StreamEvent,
    StreamEventType, StreamClientException
)
from .services import APIConnector, GenerationService, TaskPoller
from .utils import safe_json_dumps, to_wire_dict

logger = logging.getLogger(__name__)


def build_service(config: ClientConfig) -> GenerationService:
    return GenerationService(APIConnector(config))


def _print_event(event: StreamEvent) -> None:
    if event.type is StreamEventType.HEARTBEAT:
        return
    if event.type is StreamEventType.VOLUME_COMPLETE:
        detail = f"卷 {(event.volume_index or 0) + 1}/{event.total_volumes or '?'} {event.volume_title or ''}"
    elif event.type is StreamEventType.CHAPTER_COMPLETE:
        detail = f"第 {event.chapter_index} 章完成 {event.title or ''}"
    elif event.type is StreamEventType.CHAPTER_ERROR:
        detail = f"第 {event.chapter_index} 章失敗 {event.error or ''}"
    else:
        detail = event.message or ""
    click.echo(f"[{event.type.value}] {detail}".rstrip(), err=True)


def _print_task(result) -> None:
    if result is None:
        click.echo("目前沒有進行中的任務", err=True)
        return
    for item in result if isinstance(result, list) else [result]:
        click.echo(
            f"任務 #{item.id} {item.status.value} {item.progress_percent}% "
            f"({len(item.completed_chapters)}/{item.target_count}) {item.current_message or ''}".rstrip(),
            err=True
        )


def _run_stream(service: GenerationService, kind: GenerationKind, operation) -> None:
    session = service.new_session(kind, _print_event)
    try:
        result = operation(session)
    except KeyboardInterrupt:
        session.abort()
        raise click.Abort()
    except (StreamClientException, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(safe_json_dumps(to_wire_dict(result)))


def _run_control(operation, done_message: str) -> None:
    try:
        operation()
    except StreamClientException as e:
        raise click.ClickException(str(e))
    click.echo(done_message, err=True)


@click.group()
@click.option("--base-url", envvar="NOVEL_API_BASE_URL", help="API server base URL")
@click.option("--token", envvar="NOVEL_API_TOKEN", help="Bearer token")
@click.option("--ai-provider", default="", help="Custom AI provider override")
@click.option("--ai-model", default="", help="Custom AI model override")
@click.option("--ai-base-url", default="", help="Custom AI base URL override")
@click.option("--ai-api-key", envvar="NOVEL_AI_API_KEY", default="", help="Custom AI API key")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, base_url, token, ai_provider, ai_model, ai_base_url, ai_api_key, verbose):
    """Drive novel generation streams and watch task progress."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    config = ClientConfig.from_env()
    if base_url:
        config.api_base_url = base_url
    if token:
        config.token = token
    config.ai = AIOverride(
        provider=ai_provider, model=ai_model, base_url=ai_base_url, api_key=ai_api_key
    )
    ctx.obj = build_service(config)


@main.command()
@click.argument("project")
@click.option("--chapters", "target_chapters", default=400, show_default=True, type=int)
@click.option("--words", "target_word_count", default=100, show_default=True, type=int,
              help="Target word count in units of 10k characters")
@click.option("--min-words", "min_chapter_words", type=int, default=None)
@click.option("--prompt", "custom_prompt", default=None)
@click.pass_obj
def outline(service, project, target_chapters, target_word_count, min_chapter_words, custom_prompt):
    """Generate the full outline of PROJECT."""
    _run_stream(service, GenerationKind.OUTLINE, lambda session: service.generate_outline(
        project, target_chapters, target_word_count, min_chapter_words, custom_prompt,
        session=session
    ))


@main.command("add-volumes")
@click.argument("project")
@click.option("--volumes", "new_volume_count", default=1, show_default=True, type=int)
@click.option("--per-volume", "chapters_per_volume", default=80, show_default=True, type=int)
@click.option("--min-words", "min_chapter_words", type=int, default=None)
@click.pass_obj
def add_volumes(service, project, new_volume_count, chapters_per_volume, min_chapter_words):
    """Append new volumes to the outline of PROJECT."""
    _run_stream(service, GenerationKind.OUTLINE, lambda session: service.add_outline_volumes(
        project, new_volume_count, chapters_per_volume, min_chapter_words, session=session
    ))


@main.command()
@click.argument("project")
@click.pass_obj
def refine(service, project):
    """Fill in missing chapter details of the outline of PROJECT."""
    _run_stream(service, GenerationKind.OUTLINE, lambda session: service.refine_outline(
        project, session=session
    ))


@main.command()
@click.argument("project")
@click.option("--count", "chapters_to_generate", default=1, show_default=True, type=int)
@click.option("--min-words", "min_chapter_words", type=int, default=None)
@click.option("--index", type=int, default=None, help="Start from this chapter index")
@click.option("--regenerate", is_flag=True, help="Regenerate existing chapters")
@click.pass_obj
def chapters(service, project, chapters_to_generate, min_chapter_words, index, regenerate):
    """Generate a batch of chapters for PROJECT."""
    _run_stream(service, GenerationKind.CHAPTERS, lambda session: service.generate_chapters(
        project, chapters_to_generate, min_chapter_words, index, regenerate, session=session
    ))


@main.command()
@click.argument("project")
@click.option("--watch", is_flag=True, help="Keep polling until interrupted")
@click.option("--interval", type=float, default=None, help="Polling interval in seconds")
@click.pass_obj
def task(service, project, watch, interval):
    """Show the active generation task of PROJECT."""
    if watch:
        _watch(TaskPoller.for_project(service, project, _print_task, interval))
        return
    try:
        result = service.fetch_project_active_task(project)
    except StreamClientException as e:
        raise click.ClickException(str(e))
    click.echo(safe_json_dumps(to_wire_dict(result)))


@main.command()
@click.option("--watch", is_flag=True, help="Keep polling until interrupted")
@click.option("--interval", type=float, default=None, help="Polling interval in seconds")
@click.pass_obj
def tasks(service, watch, interval):
    """List all active generation tasks."""
    if watch:
        _watch(TaskPoller.for_active_tasks(service, _print_task, interval))
        return
    try:
        result = service.fetch_active_tasks()
    except StreamClientException as e:
        raise click.ClickException(str(e))
    click.echo(safe_json_dumps(to_wire_dict(result)))


@main.command()
@click.argument("project")
@click.pass_obj
def cancel(service, project):
    """Cancel every active generation task of PROJECT."""
    _run_control(lambda: service.cancel_active_tasks(project), "已取消進行中的任務")


@main.command()
@click.argument("project")
@click.argument("task_id", type=int)
@click.pass_obj
def pause(service, project, task_id):
    """Pause task TASK_ID of PROJECT."""
    _run_control(lambda: service.pause_task(project, task_id), f"任務 #{task_id} 已暫停")


@main.command("cancel-task")
@click.argument("task_id", type=int)
@click.pass_obj
def cancel_task(service, task_id):
    """Cancel a single task by TASK_ID."""
    _run_control(lambda: service.cancel_task(task_id), f"任務 #{task_id} 已取消")


def _watch(poller: TaskPoller) -> None:
    idle = threading.Event()
    with poller:
        try:
            while not idle.wait(1.0):
                pass
        except KeyboardInterrupt:
            click.echo("停止輪詢", err=True)


if __name__ == "__main__":
    main()
