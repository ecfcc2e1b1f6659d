import sys

from tqdm import tqdm

from data import MatchState, SentenceError, read_line_pairs
from labels import EquivalenceRegistry, normalize_label
from params import EvalbConfig
from parsing import ParseError, parse_line
from summary import SentenceResult, Status, Summary


class LengthMismatchError(SentenceError):
    pass


class WordMismatchError(SentenceError):
    pass


class TooManyErrorsError(Exception):
    """エラー文の数が max_errors を超えた。それまでの集計 (summary) を持つ。"""

    def __init__(self, summary):
        super().__init__(f"Too many errors ({summary.error_count})")
        self.summary = summary
        self.error_count = summary.error_count


def _is_delete_label(raw_label, label, delete_labels, label_equivalences):
    # '-NONE-' のように正規化すると空になるラベルだけは元の形で照合する
    if not label:
        return raw_label in delete_labels
    return any(label_equivalences.equivalent(label, d) for d in delete_labels)


def massage_brackets(brackets, delete_labels=(), label_equivalences=None):
    """
    括弧を評価対象 (UNMATCHED) と削除 (DELETED) に振り分け、評価対象の数を返す。

    - 幅0の括弧 (子がすべて削除された等) は削除
    - ラベルは正規化 ('NP-SBJ' -> 'NP') してから比較に使う
    - 正規化後のラベルが削除ラベルと等価な括弧は削除 (子の括弧は残る)
    """
    if label_equivalences is None:
        label_equivalences = EquivalenceRegistry()

    count = 0
    for span in brackets:
        span.state = MatchState.UNMATCHED

        if span.width == 0:
            span.state = MatchState.DELETED
            continue

        raw_label = span.label
        span.label = normalize_label(raw_label)
        if _is_delete_label(raw_label, span.label, delete_labels, label_equivalences):
            span.state = MatchState.DELETED
        else:
            count += 1
    return count


def match_brackets(gold_brackets, test_brackets, label_equivalences=None, labeled=True):
    """
    gold と test の括弧を一対一に対応付け、一致数を返す。

    gold を順に見て、位置が同じ (labeled なら等価なラベルを持つ) 最初の未対応の test 括弧と組にする。
    貪欲法なので全体最適な割り当てではない。同点は test の並び順で決まる。
    """
    if label_equivalences is None:
        label_equivalences = EquivalenceRegistry()

    match = 0
    for g in gold_brackets:
        if g.state is MatchState.DELETED:
            continue
        for t in test_brackets:
            if (t.state is MatchState.UNMATCHED
                    and g.start == t.start
                    and g.end == t.end
                    and (not labeled or label_equivalences.equivalent(g.label, t.label))):
                g.state = t.state = MatchState.MATCHED
                match += 1
                break
    return match


def crosses(gold, test):
    return ((gold.start < test.start < gold.end < test.end)
            or (test.start < gold.start < test.end < gold.end))


def count_crossing(gold_brackets, test_brackets):
    """
    gold のどれかと交差する test 括弧の数を返す。

    交差: 区間が重なるがどちらも他方を含まない。
    test 括弧一つにつき最大1 (test 側を基準に数える)。削除された括弧は両側とも無視する。
    """
    crossing = 0
    for t in test_brackets:
        if t.state is MatchState.DELETED:
            continue
        for g in gold_brackets:
            if g.state is not MatchState.DELETED and crosses(g, t):
                crossing += 1
                break
    return crossing


def check_words(gold_terminals, test_terminals, word_equivalences=None):
    if word_equivalences is None:
        word_equivalences = EquivalenceRegistry()
    for g, t in zip(gold_terminals, test_terminals):
        if not word_equivalences.equivalent(g.word, t.word):
            raise WordMismatchError(f"Words unmatch ({g.word}|{t.word})")


def score_tags(gold_terminals, test_terminals, label_equivalences=None):
    """
    品詞の一致数を返す。品詞ラベルは正規化せずそのまま比較する。
    単語数が同じであることは呼び出し側 (compare_parsed) で確認済みとする。
    """
    if label_equivalences is None:
        label_equivalences = EquivalenceRegistry()

    correct = 0
    for g, t in zip(gold_terminals, test_terminals):
        if label_equivalences.equivalent(g.label, t.label):
            g.state = t.state = MatchState.MATCHED
            correct += 1
        else:
            g.state = t.state = MatchState.UNMATCHED
    return correct


def compare_parsed(gold, test, config, index=0):
    """
    パース済みの gold / test 一文を比較して SentenceResult を返す。

    Raises:
        LengthMismatchError: 単語数が違う場合
        WordMismatchError: 対応する単語が等価でない場合
    """
    result = SentenceResult(index=index, status=Status.OK, raw_length=gold.raw_length,
                            gold=gold, test=test)

    # 1. スキップ・エラーの判定
    if len(test) == 0:
        result.status = Status.SKIP
        return result
    if len(gold) != len(test):
        raise LengthMismatchError(f"Length unmatch ({len(gold)}|{len(test)})")
    check_words(gold.terminals, test.terminals, config.word_equivalences)

    # 2. 括弧の整理 (正規化・削除)
    result.gold_count = massage_brackets(gold.brackets, config.delete_labels, config.label_equivalences)
    result.test_count = massage_brackets(test.brackets, config.delete_labels, config.label_equivalences)

    # 3. 括弧の一致・交差・品詞の一致
    result.match = match_brackets(gold.brackets, test.brackets, config.label_equivalences, config.labeled)
    result.crossing = count_crossing(gold.brackets, test.brackets)
    result.words = len(gold)
    result.correct_tags = score_tags(gold.terminals, test.terminals, config.label_equivalences)
    return result


def compare_sentences(gold_line, test_line, config=None, index=0):
    """
    gold / test の括弧表記一行ずつを比較する。一文の中のエラーは例外にせず ERROR の結果として返す。
    """
    if config is None:
        config = EvalbConfig()

    try:
        gold = parse_line(gold_line, config.delete_labels, config.delete_labels_for_length)
    except ParseError as e:
        return SentenceResult(index=index, status=Status.ERROR, message=e.message,
                              gold_line=gold_line, test_line=test_line)

    try:
        test = parse_line(test_line, config.delete_labels, config.delete_labels_for_length)
        result = compare_parsed(gold, test, config, index)
    except SentenceError as e:
        result = SentenceResult(index=index, status=Status.ERROR, raw_length=gold.raw_length,
                                message=e.message, gold=gold)
    result.gold_line = gold_line
    result.test_line = test_line
    return result


def evaluate_corpus(line_pairs, config=None, on_sentence=None, progress=True, total=None):
    """
    (行番号, gold の行, test の行) を順に比較し、集計した Summary を返す。

    Args:
        line_pairs: (int, str, str) の iterable
        config (EvalbConfig): 評価の設定
        on_sentence: 一文ごとに SentenceResult を受け取るコールバック (出力用)
        progress (bool): tqdm の進捗バーを出すかどうか
        total (int): 進捗バー用の文数 (分かっている場合)

    Raises:
        TooManyErrorsError: エラー文の数が config.max_errors を超えた場合
    """
    if config is None:
        config = EvalbConfig()
    summary = Summary(cutoff_len=config.cutoff_len)

    for index, gold_line, test_line in tqdm(line_pairs, desc="EVALB", total=total,
                                            disable=not progress, file=sys.stderr):
        result = compare_sentences(gold_line, test_line, config, index)
        summary.add(result)

        if on_sentence is not None:
            on_sentence(result)

        if result.status is Status.ERROR:
            print(f"{index} : {result.message}", file=sys.stderr)
            if summary.error_count > config.max_errors:
                raise TooManyErrorsError(summary)

    return summary


def run_evalb(gold_path, test_path, config=None, on_sentence=None, progress=True):
    """gold ファイルと test ファイルを評価する。"""
    return evaluate_corpus(read_line_pairs(gold_path, test_path), config,
                           on_sentence=on_sentence, progress=progress)
