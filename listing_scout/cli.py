#!/usr/bin/env python3
"""
Точка входа для запуска ListingScout через командную строку.

Команды:
  scrape    Собрать объявления по конфигу и вывести/сохранить отчёты
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML-конфигу (default: configs/default.yaml)
  --results INT       Сколько объявлений сохранить (override results_wanted)
  --max-pages INT     Макс. число страниц (override max_pages)
  --start-url URL     Готовый URL первой страницы (override start_url)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда scrape опции:
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблоном report.html.j2
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --scrape-timeout SEC  Таймаут всего запуска (секунд)

Дополнительно:
  --version, -v       Показать версию ListingScout

Пример:
  listing-scout --results 50 scrape --json run.json --pretty
"""
import sys
import asyncio
import json
from pathlib import Path

import click

from listing_scout import __version__
from listing_scout.config import load_config
from listing_scout.errors import ConfigurationError
from listing_scout.logger import init_logging
from listing_scout.engine import start_scrape
from listing_scout.report.json_report import render_json
from listing_scout.report.html_report import render_html

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)

@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ListingScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML.'
)
@click.option(
    '--results', '-r', 'results',
    type=int,
    default=None,
    help='Сколько объявлений сохранить (override results_wanted)'
)
@click.option(
    '--max-pages', '-l', 'max_pages',
    type=int,
    default=None,
    help='Макс. число страниц (override max_pages)'
)
@click.option(
    '--start-url', 'start_url',
    default=None,
    help='Готовый URL первой страницы (override start_url)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, results, max_pages, start_url, log_level, log_file, log_format):
    """Группа команд ListingScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
        cfg = cfg.with_overrides(results_wanted=results, max_pages=max_pages, start_url=start_url)
    except (ConfigurationError, OSError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg

@cli.command('scrape', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (встроенный, если не указана)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--scrape-timeout', 'scrape_timeout',
    type=float,
    default=None,
    help='Таймаут всего запуска (секунд)'
)
@click.pass_context
def scrape(ctx, json_output, html_output, template_dir, pretty, scrape_timeout):
    """Собрать объявления и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    try:
        if scrape_timeout:
            run = asyncio.run(
                asyncio.wait_for(start_scrape(cfg), timeout=scrape_timeout)
            )
        else:
            run = asyncio.run(start_scrape(cfg))
    except asyncio.TimeoutError:
        print_error(f'Сбор не завершён за {scrape_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при сборе: {e}')

    # Если не сохраняем в файл — печатаем сводку в stdout
    if not json_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(run.summary.to_dict(), ensure_ascii=False, indent=indent))
        return

    if json_output:
        try:
            saved_json = render_json(run, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(run, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))

def main():
    cli(obj={})

if __name__ == "__main__":
    main()
