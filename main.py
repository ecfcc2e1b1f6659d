import argparse
import sys

from data import CorpusAlignmentError
from evalb import TooManyErrorsError, run_evalb
from params import EvalbConfig, ParameterError, read_parameter_file
from report import (TagConfusion, format_bracket_errors, format_debug, format_header,
                    format_sentence, format_totals, log_summary_to_wandb, render_tree)


def build_arg_parser():
    parser = argparse.ArgumentParser(
        prog="evalb",
        description="Evaluate bracketing in test-file against gold-file. "
                    "Return recall, precision, tagging accuracy.",
    )
    parser.add_argument("gold_file")
    parser.add_argument("test_file")
    parser.add_argument("-p", "--param-file", help="parameter file")
    parser.add_argument("-d", "--debug", action="store_true", help="debug mode")
    parser.add_argument("-c", "--cutoff-len", type=int, help="cut-off length for statistics (default=40)")
    parser.add_argument("-e", "--max-errors", type=int, help="number of errors to kill (default=10)")
    parser.add_argument("--tag-report", action="store_true",
                        help="print a per-tag classification report after the summary")
    parser.add_argument("--wandb-project", help="log the corpus summary to this wandb project")
    parser.add_argument("--no-progress", action="store_true", help="disable the progress bar")
    return parser


def load_config(args):
    """パラメータファイルを読み、コマンドライン引数で上書きする。"""
    config = EvalbConfig()
    if args.param_file:
        config = read_parameter_file(args.param_file, config)
    if args.debug:
        config.debug = True
    if args.cutoff_len is not None:
        config.cutoff_len = args.cutoff_len
    if args.max_errors is not None:
        config.max_errors = args.max_errors
    return config


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ParameterError as e:
        print(e, file=sys.stderr)
        return 1

    tag_confusion = TagConfusion(config.label_equivalences) if args.tag_report else None

    def on_sentence(result):
        print(format_sentence(result))
        if config.debug:
            for line in format_bracket_errors(result):
                print(line)
            if result.gold_line.strip():
                print(render_tree(result.gold_line))
            if result.test_line.strip():
                print(render_tree(result.test_line))
            if result.gold is not None:
                print(format_debug(result))
        if tag_confusion is not None:
            tag_confusion.add(result)

    print(format_header())
    try:
        summary = run_evalb(args.gold_file, args.test_file, config,
                            on_sentence=on_sentence, progress=not args.no_progress)
    except OSError as e:
        print(f"Can't open file ({e.filename})", file=sys.stderr)
        return 1
    except CorpusAlignmentError as e:
        print(e, file=sys.stderr)
        return 1
    except TooManyErrorsError as e:
        # 途中までの集計を出してから終了する
        print(e, file=sys.stderr)
        print(format_totals(e.summary))
        return e.error_count

    print(format_totals(summary))

    if tag_confusion is not None:
        print("\n--- Detailed Tagging Report ---")
        print(tag_confusion.report())

    if args.wandb_project:
        log_summary_to_wandb(summary, args.wandb_project, config)

    return summary.error_count


if __name__ == "__main__":
    sys.exit(main())
