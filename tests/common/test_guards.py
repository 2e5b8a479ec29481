from src.worktimeline.worktimeline.common.guards import SingleFlight


def test_second_call_while_running_is_dropped():
    flight = SingleFlight("export")
    seen = []

    def outer():
        seen.append(flight.busy)
        seen.append(flight.run(lambda: "inner"))
        return "outer"

    assert flight.run(outer) == "outer"
    assert seen == [True, None]
    assert flight.busy is False


def test_lock_is_released_after_failure():
    flight = SingleFlight("export")

    def boom():
        raise RuntimeError("boom")

    try:
        flight.run(boom)
    except RuntimeError:
        pass

    assert flight.run(lambda: 1) == 1
