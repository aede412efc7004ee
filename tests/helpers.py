"""Small helpers shared by several test modules."""


def correct_choice_index(shuffled_question):
    """Position of the first correct choice as shown to the candidate."""
    return next(i for i, c in enumerate(shuffled_question.shuffled_choices) if c.is_correct)


def wrong_choice_index(shuffled_question):
    return next(i for i, c in enumerate(shuffled_question.shuffled_choices) if not c.is_correct)
