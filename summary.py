from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

from data import ParsedSentence
from params import DEFAULT_CUT_LEN


class Status(Enum):
    # 数値は一文ごとの出力の Stat. 列に出る値
    OK = 0
    ERROR = 1
    SKIP = 2


def _percent(numerator, denominator):
    return 100.0 * numerator / denominator if denominator > 0 else 0.0


@dataclass
class SentenceResult:
    """一文分の比較結果。gold_line / test_line / gold / test はデバッグ表示のためだけに持つ。"""
    index: int
    status: Status
    raw_length: int = 0
    gold_count: int = 0
    test_count: int = 0
    match: int = 0
    crossing: int = 0
    words: int = 0
    correct_tags: int = 0
    message: str = ""
    gold_line: str = ""
    test_line: str = ""
    gold: Optional[ParsedSentence] = None
    test: Optional[ParsedSentence] = None

    @property
    def recall(self):
        return _percent(self.match, self.gold_count)

    @property
    def precision(self):
        return _percent(self.match, self.test_count)

    @property
    def tagging_accuracy(self):
        return _percent(self.correct_tags, self.words)

    @property
    def complete_match(self):
        return self.gold_count == self.test_count == self.match


@dataclass
class CorpusAggregate:
    """コーパス全体の累積カウンタ。すべて単純な足し算なので順序に依存しない。"""
    gold_brackets: int = 0
    test_brackets: int = 0
    matched_brackets: int = 0
    sentences: int = 0
    error_sentences: int = 0
    skip_sentences: int = 0
    complete_sentences: int = 0
    crossing: int = 0
    no_crossing_sentences: int = 0
    two_or_less_crossing_sentences: int = 0
    words: int = 0
    correct_tags: int = 0

    def add(self, result):
        self.sentences += 1
        if result.status is Status.ERROR:
            self.error_sentences += 1
            return
        if result.status is Status.SKIP:
            self.skip_sentences += 1
            return

        self.gold_brackets += result.gold_count
        self.test_brackets += result.test_count
        self.matched_brackets += result.match
        if result.complete_match:
            self.complete_sentences += 1
        self.crossing += result.crossing
        if result.crossing == 0:
            self.no_crossing_sentences += 1
        if result.crossing <= 2:
            self.two_or_less_crossing_sentences += 1
        self.words += result.words
        self.correct_tags += result.correct_tags

    def merge(self, other):
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        return self

    @property
    def valid_sentences(self):
        return self.sentences - self.error_sentences - self.skip_sentences

    @property
    def recall(self):
        return _percent(self.matched_brackets, self.gold_brackets)

    @property
    def precision(self):
        return _percent(self.matched_brackets, self.test_brackets)

    @property
    def f_measure(self):
        r, p = self.recall, self.precision
        return 2 * r * p / (r + p) if r + p > 0 else 0.0

    @property
    def complete_match(self):
        return _percent(self.complete_sentences, self.valid_sentences)

    @property
    def average_crossing(self):
        valid = self.valid_sentences
        return self.crossing / valid if valid > 0 else 0.0

    @property
    def no_crossing(self):
        return _percent(self.no_crossing_sentences, self.valid_sentences)

    @property
    def two_or_less_crossing(self):
        return _percent(self.two_or_less_crossing_sentences, self.valid_sentences)

    @property
    def tagging_accuracy(self):
        return _percent(self.correct_tags, self.words)

    def metrics(self):
        return {
            "sentences": self.sentences,
            "error_sentences": self.error_sentences,
            "skip_sentences": self.skip_sentences,
            "valid_sentences": self.valid_sentences,
            "recall": self.recall,
            "precision": self.precision,
            "f_measure": self.f_measure,
            "complete_match": self.complete_match,
            "average_crossing": self.average_crossing,
            "no_crossing": self.no_crossing,
            "two_or_less_crossing": self.two_or_less_crossing,
            "tagging_accuracy": self.tagging_accuracy,
        }


class Summary:
    """
    全文の集計 (all) と、文長が cutoff_len 以下の文だけの集計 (cutoff) を持つ。
    文長には gold の raw_length を使う。
    """

    def __init__(self, cutoff_len=DEFAULT_CUT_LEN):
        self.cutoff_len = cutoff_len
        self.all = CorpusAggregate()
        self.cutoff = CorpusAggregate()
        self.error_count = 0

    def add(self, result):
        self.all.add(result)
        if result.raw_length <= self.cutoff_len:
            self.cutoff.add(result)
        if result.status is Status.ERROR:
            self.error_count += 1

    def __repr__(self):
        return (f"Summary(cutoff_len={self.cutoff_len}, error_count={self.error_count}, "
                f"all={self.all!r}, cutoff={self.cutoff!r})")
