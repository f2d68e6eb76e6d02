import argparse
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from .config import CONFIG
from .data.loaders import construct_slug_map, load_constructs, load_diary_seed, load_models
from .diagram import build_model_diagram
from .diary import DiaryStore, create_entry, filter_entries
from .layout import compute_layout, compute_theory_map
from .identifiers import resolve_node_ids
from .models import DiagramNode, Geometry, InvalidInputError
from .render.page import render_diary, render_model_page, render_models_index, render_theory_map

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_dir: str = None) -> logging.Logger:
    """Console output plus a single rotating file in the log directory."""
    logs_dir = Path(log_dir or CONFIG.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if verbose else logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    simple_formatter = logging.Formatter('%(asctime)s | %(levelname)-7s | %(message)s')

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(simple_formatter)
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        logs_dir / "theory-atlas.log",
        maxBytes=2*1024*1024,  # 2MB
        backupCount=2,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(simple_formatter)
    root.addHandler(file_handler)
    return root


def cmd_layout(args: argparse.Namespace) -> int:
    models = {m.id: m for m in load_models(args.content)}
    model = models.get(args.model_id)
    if model is None:
        print(f"Unknown model: {args.model_id}", file=sys.stderr)
        return 1
    try:
        ids = resolve_node_ids(model.constructs, model.construct_abbreviations)
        nodes = [DiagramNode(id=i, full_name=name) for i, name in zip(ids, model.constructs)]
        positions = compute_layout(nodes, model.relationships, Geometry.from_config())
    except InvalidInputError as e:
        print(f"Cannot lay out {model.id}: {e}", file=sys.stderr)
        return 1
    print(json.dumps({k: p.as_dict() for k, p in positions.items()}, indent=2))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    base = CONFIG.site_base
    out = Path(args.output or CONFIG.output_dir)
    (out / 'models').mkdir(parents=True, exist_ok=True)

    models = load_models(args.content)
    slugs = construct_slug_map(load_constructs(args.content))
    geometry = Geometry.from_config()
    for model in models:
        diagram = build_model_diagram(model, slugs, geometry, base=base)
        path = out / 'models' / f"{model.id}.html"
        path.write_text(render_model_page(model, diagram, slugs, base=base), encoding='utf-8')
        logger.info(f"Wrote {path}")

    (out / 'models.html').write_text(render_models_index(models, base=base), encoding='utf-8')

    theory_map = compute_theory_map(models, slugs, base=base)
    (out / 'theory-map.html').write_text(render_theory_map(theory_map, base=base), encoding='utf-8')

    store = DiaryStore(args.diary_file or CONFIG.diary_file)
    entries = store.entries(load_diary_seed(args.content))
    (out / 'diary.html').write_text(render_diary(entries, base=base), encoding='utf-8')
    print(f"Wrote models index, {len(models)} model page(s), theory map and diary to {out}")
    return 0


def cmd_diary_list(args: argparse.Namespace) -> int:
    store = DiaryStore(args.diary_file or CONFIG.diary_file)
    entries = filter_entries(
        store.entries(load_diary_seed(args.content)),
        search=args.search or '',
        tag=args.tag or '',
        date_from=args.date_from or '',
        date_to=args.date_to or '',
    )
    for e in entries:
        tags = f" [{', '.join(e.tags)}]" if e.tags else ''
        print(f"{e.date}  {e.summary}{tags}")
    return 0


def cmd_diary_add(args: argparse.Namespace) -> int:
    try:
        entry = create_entry(
            args.summary,
            detailed_reflection=args.reflection or '',
            tags=args.tag or [],
            linked_constructs=args.constructs or '',
        )
    except InvalidInputError as e:
        print(f"Invalid entry: {e}", file=sys.stderr)
        return 1
    store = DiaryStore(args.diary_file or CONFIG.diary_file)
    store.add(entry, load_diary_seed(args.content))
    print(f"Added {entry.id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='theory-atlas')
    p.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    p.add_argument('--content', default=CONFIG.content_dir, help='Content directory (default: %(default)s)')
    p.add_argument('--diary-file', help='Local diary entries file')
    # Accepted after the subcommand too; SUPPRESS keeps the top-level value when omitted there.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--content', default=argparse.SUPPRESS, help='Content directory')
    common.add_argument('--diary-file', default=argparse.SUPPRESS, help='Local diary entries file')
    sub = p.add_subparsers(dest='command', required=True)

    lay = sub.add_parser('layout', parents=[common], help='Print layered layout positions for a model as JSON')
    lay.add_argument('model_id')
    lay.set_defaults(func=cmd_layout)

    r = sub.add_parser('render', parents=[common], help='Render the models index, model pages, theory map and diary to HTML')
    r.add_argument('-o', '--output', help='Output directory (default: dist)')
    r.set_defaults(func=cmd_render)

    d = sub.add_parser('diary', help='List or add research diary entries')
    dsub = d.add_subparsers(dest='diary_command', required=True)
    dl = dsub.add_parser('list', parents=[common], help='List entries, newest first')
    dl.add_argument('--search')
    dl.add_argument('--tag')
    dl.add_argument('--from', dest='date_from', help='YYYY-MM-DD')
    dl.add_argument('--to', dest='date_to', help='YYYY-MM-DD')
    dl.set_defaults(func=cmd_diary_list)
    da = dsub.add_parser('add', parents=[common], help='Add an entry dated today')
    da.add_argument('summary')
    da.add_argument('--reflection')
    da.add_argument('--tag', action='append')
    da.add_argument('--constructs', help='Comma or semicolon separated construct names')
    da.set_defaults(func=cmd_diary_add)
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except InvalidInputError as e:
        logger.error(f"Invalid content: {e}")
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
