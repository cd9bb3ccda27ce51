from vizengine.config import ChartOptions
from vizengine.services import ChartEvent, EventBus
from vizengine.services.tooltip import TooltipPhase, TooltipStateMachine

PAYLOAD = {"element_id": "bar:0", "datum": {"label": "North", "value": 12.34}, "screen_position": (100, 50)}


def test_enter_move_leave_cycle():
    machine = TooltipStateMachine()
    assert machine.phase is TooltipPhase.HIDDEN
    tip = machine.hover_enter(PAYLOAD)
    assert machine.visible
    assert tip.content == "North: 12.3"
    assert tip.position == (115, 40)
    assert tip.element_id == "bar:0"
    moved = machine.hover_move({**PAYLOAD, "screen_position": (10, 10)})
    assert moved.position == (25, 0)
    machine.hover_leave()
    assert not machine.visible
    assert machine.tooltip.content == ""


def test_move_while_hidden_is_ignored():
    machine = TooltipStateMachine()
    tip = machine.hover_move(PAYLOAD)
    assert not tip.visible
    assert machine.phase is TooltipPhase.HIDDEN


def test_custom_formatter_and_offset():
    options = ChartOptions(tooltip_formatter=lambda d: f"<{d['label']}>", tooltip_offset=(0, 0))
    machine = TooltipStateMachine(options)
    tip = machine.hover_enter(PAYLOAD)
    assert tip.content == "<North>"
    assert tip.position == (100, 50)


def test_large_values_use_thousands_separator():
    machine = TooltipStateMachine()
    tip = machine.hover_enter({"datum": {"label": "Total", "value": 12345.6}})
    assert tip.content == "Total: 12,346"
    assert tip.position is None


def test_bound_to_bus():
    bus = EventBus()
    machine = TooltipStateMachine()
    machine.bind(bus)
    bus.publish(ChartEvent.HOVER_ENTER, PAYLOAD)
    assert machine.visible
    bus.publish(ChartEvent.HOVER_LEAVE, PAYLOAD)
    assert not machine.visible
    machine.unbind(bus)
    bus.publish(ChartEvent.HOVER_ENTER, PAYLOAD)
    assert not machine.visible
    assert bus.subscriber_count(ChartEvent.HOVER_ENTER) == 0
