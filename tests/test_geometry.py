import pytest
from shapely.geometry import Point, Polygon, box

from gpCamlib.errors import BoardBusy, BoardFinalized, CompositionCancelled
from gpCamlib.geometry import BoardProgram, DrawItem, CLEAR, DARK, compose_board_area


def make_program(*items):
    program = BoardProgram()
    for geometry, polarity in items:
        program.append(geometry, polarity)
    return program


def test_append_and_bounds():
    program = BoardProgram()
    item = program.append(box(0, 0, 1, 1), DARK)

    assert isinstance(item, DrawItem)
    assert item.polarity == DARK
    assert program.bounds() == (0, 0, 1, 1)

    program.append(box(-1, 0.5, 0.5, 3), CLEAR)
    assert program.bounds() == (-1, 0, 1, 3)
    assert len(program) == 2
    assert [i.polarity for i in program] == [DARK, CLEAR]


def test_empty_program_bounds():
    program = BoardProgram()
    assert program.bounds() == (0, 0, 0, 0)
    assert program.units == 'in'


def test_empty_geometry_is_skipped():
    program = BoardProgram()
    assert program.append(Polygon(), DARK) is None
    assert len(program) == 0
    assert program.bounds() == (0, 0, 0, 0)


def test_finalized_program_rejects_items():
    program = make_program((box(0, 0, 1, 1), DARK))
    program.finalize()
    with pytest.raises(BoardFinalized):
        program.append(box(0, 0, 2, 2), DARK)


def test_clear_removes_previous_dark():
    program = make_program((box(0, 0, 2, 2), DARK), (box(1, 1, 3, 3), CLEAR))
    area = compose_board_area(program)
    assert area.area == pytest.approx(3.0)
    assert program.finalized


def test_composition_order_matters():
    a = box(0, 0, 2, 2)
    b = box(1, 1, 3, 3)

    dark_then_clear = compose_board_area(make_program((a, DARK), (b, CLEAR)))
    clear_then_dark = compose_board_area(make_program((b, CLEAR), (a, DARK)))

    assert dark_then_clear.area == pytest.approx(3.0)
    assert clear_then_dark.area == pytest.approx(4.0)
    assert dark_then_clear.area != clear_then_dark.area


def test_clear_does_not_affect_later_dark():
    program = make_program((box(0, 0, 1, 1), DARK),
                           (Point(0.5, 0.5).buffer(0.2), CLEAR),
                           (box(0.4, 0.4, 0.6, 0.6), DARK))
    area = program.compose()
    assert area.contains(Point(0.5, 0.5))
    assert not area.contains(Point(0.5, 0.65))


def test_progress_per_item():
    program = make_program((box(0, 0, 1, 1), DARK), (box(2, 0, 3, 1), DARK), (box(0, 0, 3, 1), CLEAR))
    fractions = []
    area = compose_board_area(program, on_progress=fractions.append)

    assert fractions == pytest.approx([1 / 3, 2 / 3, 1.0])
    assert area.is_empty


def test_progress_is_coalesced():
    program = make_program(*[(box(i, 0, i + 0.5, 1), DARK) for i in range(300)])
    fractions = []
    compose_board_area(program, on_progress=fractions.append)

    # One call per integer percentage, 0 to 100.
    assert len(fractions) == 101
    assert [round(f * 300) * 100 // 300 for f in fractions] == list(range(101))
    assert fractions == sorted(fractions)
    assert fractions[-1] == 1.0
    assert all(0 < f <= 1 for f in fractions)


def test_progress_of_empty_program():
    fractions = []
    area = compose_board_area(BoardProgram(), on_progress=fractions.append)
    assert fractions == [1.0]
    assert area.is_empty


def test_cancellation():
    program = make_program(*[(box(i, 0, i + 0.5, 1), DARK) for i in range(10)])
    fractions = []

    with pytest.raises(CompositionCancelled):
        compose_board_area(program, on_progress=fractions.append, cancelled=lambda: len(fractions) >= 3)
    assert len(fractions) == 3

    # The board can be composed again afterwards.
    assert compose_board_area(program).area == pytest.approx(5.0)


def test_concurrent_composition_is_rejected():
    program = make_program((box(0, 0, 1, 1), DARK), (box(2, 0, 3, 1), DARK))
    errors = []

    def on_progress(fraction):
        try:
            compose_board_area(program)
        except BoardBusy as err:
            errors.append(err)

    compose_board_area(program, on_progress=on_progress)
    assert len(errors) == 2


@pytest.mark.parametrize('geometry', [None, object()])
def test_non_geometry_item_is_rejected(geometry):
    program = make_program((box(0, 0, 1, 1), DARK))
    program.items.append(DrawItem(geometry, DARK))

    with pytest.raises(TypeError):
        compose_board_area(program)

    # The lock is released after the failure.
    program.items.pop()
    assert compose_board_area(program).area == pytest.approx(1.0)
