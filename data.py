from dataclasses import dataclass, field
from enum import Enum
from itertools import zip_longest


class MatchState(Enum):
    # 数値は元の evalb の result フィールドに合わせている (debug 表示で使う)
    UNMATCHED = 0
    MATCHED = 1
    DELETED = 5
    UNDEFINED = 9


@dataclass
class Terminal:
    word: str
    label: str
    state: MatchState = MatchState.UNDEFINED


@dataclass
class BracketSpan:
    """
    終端記号列上のラベル付き区間 [start, end)。
    start / end はパース時に決まり、その後は変更しない。
    label は massage_brackets で正規化されたラベルに置き換えられる。
    """
    start: int
    end: int
    label: str
    state: MatchState = MatchState.UNDEFINED

    @property
    def width(self):
        return self.end - self.start


@dataclass
class ParsedSentence:
    terminals: list = field(default_factory=list)
    brackets: list = field(default_factory=list)
    raw_length: int = 0

    def words(self):
        return [t.word for t in self.terminals]

    def tags(self):
        return [t.label for t in self.terminals]

    def __len__(self):
        return len(self.terminals)


class SentenceError(Exception):
    """一文の比較だけを中断するエラー。コーパス全体の処理は続ける。"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class CorpusAlignmentError(Exception):
    """gold と test の行数が合わない。コーパス全体として致命的。"""


def read_line_pairs(gold_path, test_path):
    """
    gold ファイルと test ファイルを一行ずつ対応させて読み出す。

    Args:
        gold_path (str): 正解の木構造ファイル (1行1文)
        test_path (str): 評価対象の木構造ファイル (1行1文)

    Yields:
        (int, str, str): 1始まりの行番号、gold の行、test の行

    Raises:
        CorpusAlignmentError: 片方のファイルにだけ空でない行が残っている場合
    """
    # UTF-8 として読めないバイトは U+FFFD に置き換え、その文だけの問題にとどめる
    with open(gold_path, 'r', encoding='utf-8', errors='replace') as gold_file, \
         open(test_path, 'r', encoding='utf-8', errors='replace') as test_file:
        pairs = zip_longest(gold_file, test_file)
        for line_no, (gold_line, test_line) in enumerate(pairs, start=1):
            if gold_line is None or test_line is None:
                # 末尾の空行だけなら行数のずれとはみなさない
                rest = [gold_line if test_line is None else test_line]
                rest.extend(g if t is None else t for g, t in pairs)
                if any(line.strip() for line in rest):
                    side = "gold" if test_line is None else "test"
                    raise CorpusAlignmentError(
                        f"Number of lines unmatch (too many lines in {side} file)"
                    )
                return
            yield line_no, gold_line.rstrip('\n'), test_line.rstrip('\n')
