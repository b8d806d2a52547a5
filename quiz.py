# quiz.py
"""
测验引擎

setup -> active -> finished，active 可以前后翻题，restart 回到 setup。
只有含阿拉伯文的单词参与测验，掌握程度低的单词优先。
"""
import random
from dataclasses import dataclass
from typing import List, Optional

from stats import percent
from text_utils import contains_arabic, extract_arabic, extract_non_arabic

ARABIC_TO_ENGLISH = 'arabic-to-english'
ENGLISH_TO_ARABIC = 'english-to-arabic'
MIXED = 'mixed'
QUIZ_TYPES = (ARABIC_TO_ENGLISH, ENGLISH_TO_ARABIC, MIXED)

FLASHCARD = 'flashcard'
MULTIPLE_CHOICE = 'multiple-choice'
QUIZ_MODES = (FLASHCARD, MULTIPLE_CHOICE)

QUIZ_SIZES = (5, 10, 20)
MAX_DISTRACTORS = 3

SETUP = 'setup'
ACTIVE = 'active'
FINISHED = 'finished'


class QuizError(Exception):
    pass


@dataclass(frozen=True)
class QuizAnswer:
    word_id: str
    correct: bool
    correct_answer: str
    user_answer: Optional[str] = None


@dataclass(frozen=True)
class Question:
    word_id: str
    direction: str
    prompt: str
    answer: str
    options: List[str]


def question_direction(quiz_type, index):
    if quiz_type == MIXED:
        return ARABIC_TO_ENGLISH if index % 2 == 0 else ENGLISH_TO_ARABIC
    return quiz_type


def question_text(text, direction):
    if direction == ARABIC_TO_ENGLISH:
        return extract_arabic(text)
    return extract_non_arabic(text)


def answer_text(text, direction):
    if direction == ARABIC_TO_ENGLISH:
        return extract_non_arabic(text)
    return extract_arabic(text)


def select_quiz_words(words, size, rng=None):
    """按掌握数升序取前 size 个，再打乱出题顺序"""
    eligible = [w for w in words if contains_arabic(w.text)]
    prioritized = sorted(eligible, key=lambda w: w.mastery_count)
    selected = prioritized[:size]
    (rng or random).shuffle(selected)
    return selected


def feedback_tier(score):
    if score >= 90:
        return 'excellent'
    if score >= 70:
        return 'great'
    if score >= 50:
        return 'good'
    return 'keep studying'


FEEDBACK_MESSAGES = {
    'excellent': "Excellent! You're mastering these words.",
    'great': 'Great job! Keep practicing.',
    'good': 'Good effort! More practice will help.',
    'keep studying': "Keep studying! You'll improve with practice.",
}


class QuizSession:
    def __init__(self, quiz_type=MIXED, mode=FLASHCARD, size=10, rng=None):
        self.rng = rng or random.Random()
        self.quiz_type = MIXED
        self.mode = FLASHCARD
        self.size = 10
        self._clear()
        self.configure(quiz_type=quiz_type, mode=mode, size=size)

    def _clear(self):
        self.state = SETUP
        self.words = []
        self.answers = []
        self.index = 0
        self.show_answer = False
        self.flipped = False
        self._options = {}

    def configure(self, quiz_type=None, mode=None, size=None):
        if self.state != SETUP:
            raise QuizError('Quiz settings can only change during setup')
        if quiz_type is not None:
            if quiz_type not in QUIZ_TYPES:
                raise ValueError(f'Unknown quiz type: {quiz_type}')
            self.quiz_type = quiz_type
        if mode is not None:
            if mode not in QUIZ_MODES:
                raise ValueError(f'Unknown quiz mode: {mode}')
            self.mode = mode
        if size is not None:
            if size not in QUIZ_SIZES:
                raise ValueError(f'Quiz size must be one of {QUIZ_SIZES}')
            self.size = size

    def start(self, words):
        if self.state != SETUP:
            raise QuizError('Quiz already started')
        selected = select_quiz_words(words, self.size, self.rng)
        if not selected:
            raise QuizError('No words with Arabic text available for a quiz')
        self.words = selected
        self.answers = []
        self.index = 0
        self.show_answer = False
        self.flipped = False
        self._options = {}
        self.state = ACTIVE

    def _require_active(self):
        if self.state != ACTIVE:
            raise QuizError(f'Quiz is not active (state: {self.state})')

    @property
    def current_word(self):
        if self.state != ACTIVE or self.index >= len(self.words):
            return None
        return self.words[self.index]

    @property
    def progress(self):
        if not self.words:
            return 0
        return (self.index + 1) * 100 / len(self.words)

    def _build_options(self, word, direction, correct):
        candidates = []
        for other in self.words:
            if other.id == word.id:
                continue
            text = answer_text(other.text, direction)
            if text == correct or not text.strip():
                continue
            candidates.append(text)
        self.rng.shuffle(candidates)
        options = [correct] + candidates[:MAX_DISTRACTORS]
        self.rng.shuffle(options)
        return options

    def current_question(self):
        self._require_active()
        word = self.current_word
        direction = question_direction(self.quiz_type, self.index)
        correct = answer_text(word.text, direction)
        options = []
        if self.mode == MULTIPLE_CHOICE:
            # 每道题的选项只生成一次，来回翻题不变
            if self.index not in self._options:
                self._options[self.index] = self._build_options(word, direction, correct)
            options = list(self._options[self.index])
        return Question(
            word_id=word.id,
            direction=direction,
            prompt=question_text(word.text, direction),
            answer=correct,
            options=options,
        )

    def flip(self):
        """翻转卡片，只在闪卡模式且未作答时有效"""
        self._require_active()
        if self.mode != FLASHCARD or self.show_answer:
            return False
        self.flipped = not self.flipped
        return True

    def answer(self, correct, user_answer=None):
        self._require_active()
        if self.show_answer:
            raise QuizError('Question already answered')
        question = self.current_question()
        record = QuizAnswer(
            word_id=question.word_id,
            correct=bool(correct),
            correct_answer=question.answer,
            user_answer=user_answer,
        )
        self.answers.append(record)
        self.show_answer = True
        return record

    def choose(self, option):
        if self.mode != MULTIPLE_CHOICE:
            raise QuizError('choose() is only available in multiple-choice mode')
        question = self.current_question()
        return self.answer(option == question.answer, option)

    def next(self):
        self._require_active()
        if not self.show_answer:
            raise QuizError('Question not answered yet')
        if self.index < len(self.words) - 1:
            self.index += 1
            self.show_answer = False
            self.flipped = False
        else:
            self.state = FINISHED

    def previous(self):
        self._require_active()
        if self.index == 0:
            return False
        self.index -= 1
        if self.answers:
            self.answers.pop()
        self.show_answer = False
        self.flipped = False
        return True

    def restart(self):
        # 保留题型、模式、数量作为下次的默认设置
        self._clear()

    @property
    def correct_count(self):
        return sum(1 for a in self.answers if a.correct)

    def score(self):
        return percent(self.correct_count, len(self.answers))

    def feedback(self):
        return feedback_tier(self.score())

    def feedback_message(self):
        return FEEDBACK_MESSAGES[self.feedback()]

    def results(self):
        words = {w.id: w for w in self.words}
        rows = []
        for answer in self.answers:
            word = words.get(answer.word_id)
            if word is None:
                continue
            rows.append({
                'wordId': answer.word_id,
                'text': word.text,
                'correct': answer.correct,
                'userAnswer': answer.user_answer,
                'correctAnswer': answer.correct_answer,
            })
        return rows
