from budget_tracker.taxonomy import (
    CATEGORY_DISPLAY,
    DEFAULT_CUSTOM_DISPLAY,
    ExpenseCategory,
    RecurrenceFrequency,
    category_display,
    frequency_display,
    parse_category,
    parse_frequency,
    status_color,
)


def test_every_category_has_display_metadata():
    assert set(CATEGORY_DISPLAY) == set(ExpenseCategory)
    for meta in CATEGORY_DISPLAY.values():
        assert meta['icon'] and meta['color']


def test_category_display_lookup():
    assert category_display(ExpenseCategory.FOOD) == {'icon': 'fork.knife', 'color': 'orange'}
    assert category_display('Pets')['icon'] == 'pawprint.fill'
    assert category_display('Coffee') == DEFAULT_CUSTOM_DISPLAY


def test_category_display_returns_a_copy():
    meta = category_display(ExpenseCategory.FOOD)
    meta['color'] = 'black'
    assert CATEGORY_DISPLAY[ExpenseCategory.FOOD]['color'] == 'orange'


def test_parse_category_is_lenient():
    assert parse_category('Food') is ExpenseCategory.FOOD
    assert parse_category(' food ') is ExpenseCategory.FOOD
    assert parse_category('ENTERTAINMENT') is ExpenseCategory.ENTERTAINMENT
    assert parse_category('Groceries') is None
    assert parse_category(None) is None
    assert parse_category(42) is None


def test_parse_frequency_accepts_spelling_variants():
    assert parse_frequency('Bi-weekly') is RecurrenceFrequency.BIWEEKLY
    assert parse_frequency('biweekly') is RecurrenceFrequency.BIWEEKLY
    assert parse_frequency('MONTHLY') is RecurrenceFrequency.MONTHLY
    assert parse_frequency('yearly') is None


def test_frequency_display():
    assert frequency_display('Monthly') == 'calendar'
    assert frequency_display('Weekly') == 'calendar.badge.clock'
    assert frequency_display('Daily') is None


def test_status_color_bands():
    assert status_color(0) == 'green'
    assert status_color(69.9) == 'green'
    assert status_color(70) == 'yellow'
    assert status_color(89.9) == 'yellow'
    assert status_color(90) == 'orange'
    assert status_color(99.9) == 'orange'
    assert status_color(100) == 'red'
    assert status_color(250) == 'red'
