import sys
from dataclasses import dataclass, field

from labels import EquivalenceRegistry

DEFAULT_MAX_ERROR = 10
DEFAULT_CUT_LEN = 40


class ParameterError(Exception):
    pass


@dataclass
class EvalbConfig:
    """
    評価の設定。パラメータファイル (-p) とコマンドライン引数から作られる。
    """
    labeled: bool = True
    delete_labels: set = field(default_factory=set)
    delete_labels_for_length: set = field(default_factory=set)
    label_equivalences: EquivalenceRegistry = field(default_factory=EquivalenceRegistry)
    word_equivalences: EquivalenceRegistry = field(default_factory=EquivalenceRegistry)
    cutoff_len: int = DEFAULT_CUT_LEN
    max_errors: int = DEFAULT_MAX_ERROR
    debug: bool = False

    def as_dict(self):
        # wandb.init(config=...) に渡す用
        return {
            "labeled": self.labeled,
            "delete_labels": sorted(self.delete_labels),
            "delete_labels_for_length": sorted(self.delete_labels_for_length),
            "eq_labels": [list(p) for p in self.label_equivalences.pairs()],
            "eq_words": [list(p) for p in self.word_equivalences.pairs()],
            "cutoff_len": self.cutoff_len,
            "max_errors": self.max_errors,
        }


def _to_int(keyword, value, line_no):
    try:
        return int(value.split()[0])
    except ValueError:
        raise ParameterError(f"{keyword} requires an integer value (line {line_no}): {value!r}")


def set_param(config, keyword, value, line_no=0):
    """キーワード一つ分の設定を config に反映する。"""
    if keyword == "DEBUG":
        config.debug = _to_int(keyword, value, line_no) != 0
    elif keyword == "MAX_ERROR":
        config.max_errors = _to_int(keyword, value, line_no)
    elif keyword == "CUTOFF_LEN":
        config.cutoff_len = _to_int(keyword, value, line_no)
    elif keyword == "LABELED":
        config.labeled = _to_int(keyword, value, line_no) != 0
    elif keyword == "DELETE_LABEL":
        config.delete_labels.add(value)
    elif keyword == "DELETE_LABEL_FOR_LENGTH":
        config.delete_labels_for_length.add(value)
    elif keyword in ("EQ_LABEL", "EQ_WORD"):
        values = value.split()
        if len(values) != 2:
            print(f"{keyword} requires two values (line {line_no})", file=sys.stderr)
            return
        registry = config.label_equivalences if keyword == "EQ_LABEL" else config.word_equivalences
        registry.add(values[0], values[1])
    else:
        print(f"Unknown keyword ({keyword}) in parameter file (line {line_no})", file=sys.stderr)


def parse_parameters(lines, config=None):
    """
    パラメータファイルの各行を読み、EvalbConfig を返す。

    書式は一行に 'KEYWORD 値'。'#' で始まる行と、末尾の空白を除いて3文字未満の行は無視する。
        DELETE_LABEL      TOP
        DELETE_LABEL      -NONE-
        EQ_LABEL          ADVP PRT
    """
    if config is None:
        config = EvalbConfig()

    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip()
        if line.startswith('#') or len(line) < 3:
            continue

        parts = line.split(None, 1)
        keyword = parts[0]
        if len(parts) < 2:
            print(f"Empty value in parameter file ({line_no})", file=sys.stderr)
            continue
        set_param(config, keyword, parts[1].strip(), line_no)

    return config


def read_parameter_file(path, config=None):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return parse_parameters(f, config)
    except OSError as e:
        raise ParameterError(f"Can't open parameter file ({path})") from e
