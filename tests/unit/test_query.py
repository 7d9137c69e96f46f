import pytest

from elementquery.core.errors import RemoteError, SelectorNotFound
from elementquery.core.poller import Deadline, DeadlineWithMinAttempts, Immediate, MaxAttempts
from elementquery.core.query import ElementQuery
from elementquery.selectors.by import By
from elementquery.selectors.filters import FunctionFilter
from elementquery.selectors.needle import StringMatch

MISSING = By.css("thiswont.match")
SEARCH = By.id("searchInput")


# ---------- Policy exhaustion ----------

@pytest.mark.asyncio
async def test_deadline_exhaustion_within_one_interval(clock, make_source):
    source = make_source(default_poller=Deadline(timeout_ms=100, interval_ms=30))

    assert await source.query(MISSING).all() == []
    # attempts at 0, 30, 60, 90, 120
    assert 100 <= clock.now < 130
    assert len(source.lookups()) == 5


@pytest.mark.asyncio
async def test_deadline_exhaustion_with_slow_lookups(clock, make_source):
    source = make_source(latency={MISSING: 7}, default_poller=Deadline(timeout_ms=100, interval_ms=30))

    with pytest.raises(SelectorNotFound):
        await source.query(MISSING).first()
    assert 100 <= clock.now < 130


@pytest.mark.asyncio
async def test_max_attempts_calls_lookup_exactly_n_times(clock, make_source):
    source = make_source(default_poller=MaxAttempts(max_tries=4, interval_ms=10))

    with pytest.raises(SelectorNotFound) as exc_info:
        await source.query(MISSING).first()

    assert len(source.lookups()) == 4
    assert clock.sleeps == [10, 10, 10]
    assert str(exc_info.value) == "Element(s) not found using selectors: [css=thiswont.match]"


@pytest.mark.asyncio
async def test_deadline_with_min_attempts_keeps_polling_past_timeout(clock, make_source):
    source = make_source(default_poller=DeadlineWithMinAttempts(timeout_ms=50, interval_ms=10, min_tries=10))

    assert await source.query(MISSING).all() == []
    assert len(source.lookups()) == 10
    assert clock.now == 90


@pytest.mark.asyncio
async def test_deadline_with_min_attempts_keeps_polling_until_timeout(clock, make_source):
    source = make_source(default_poller=DeadlineWithMinAttempts(timeout_ms=100, interval_ms=10, min_tries=2))

    assert await source.query(MISSING).all() == []
    assert len(source.lookups()) == 11
    assert clock.now == 100


# ---------- Terminals ----------

@pytest.mark.asyncio
async def test_first_after_three_empty_lookups(clock, make_source, make_element):
    el = make_element("hit")
    source = make_source({SEARCH: [[], [], [], [el]]}, default_poller=MaxAttempts(max_tries=5, interval_ms=10))

    assert await source.query(SEARCH).first() is el
    assert len(source.lookups()) == 4


@pytest.mark.asyncio
async def test_empty_selector_list_fails_without_lookups(clock, make_source):
    source = make_source()
    query = ElementQuery(source=source, poller=MaxAttempts(max_tries=3, interval_ms=10))

    with pytest.raises(SelectorNotFound):
        await query.first()
    assert source.calls == []
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_exists_never_sleeps_and_tries_each_selector_once(clock, make_source, make_element):
    source = make_source(default_poller=Deadline(timeout_ms=1000, interval_ms=100))
    query = source.query(MISSING).or_(SEARCH)

    assert await query.exists() is False
    assert clock.sleeps == []
    assert source.lookups() == [("find_elements", str(MISSING)), ("find_elements", str(SEARCH))]
    # configured policy is untouched
    assert query.poller == Deadline(timeout_ms=1000, interval_ms=100)

    source = make_source({SEARCH: [[make_element()]]})
    assert await source.query(SEARCH).exists() is True


@pytest.mark.asyncio
async def test_all_returns_every_match_of_winning_selector(clock, make_source, make_element):
    a, b, c = make_element("a"), make_element("b"), make_element("c")
    source = make_source({MISSING: [[]], SEARCH: [[a, b]], By.tag("div"): [[c]]})

    assert await source.query(MISSING).or_(SEARCH).or_(By.tag("div")).all() == [a, b]
    # the third selector is never needed
    assert source.lookups(By.tag("div")) == []


@pytest.mark.asyncio
async def test_all_required_raises_when_nothing_matches(clock, make_source):
    source = make_source()

    with pytest.raises(SelectorNotFound) as exc_info:
        await source.query(MISSING).or_(SEARCH).all_required()
    assert exc_info.value.selectors == [MISSING, SEARCH]
    assert "[css=thiswont.match,id=searchInput]" in str(exc_info.value)


# ---------- Selector fallback ----------

@pytest.mark.asyncio
async def test_fallback_selector_retried_in_order(clock, make_source, make_element):
    el = make_element("search")
    source = make_source({SEARCH: [[], [el]]}, default_poller=MaxAttempts(max_tries=5, interval_ms=10))

    assert await source.query(MISSING).or_(SEARCH).first() is el
    assert [c[1] for c in source.calls] == [str(MISSING), str(SEARCH), str(MISSING), str(SEARCH)]


@pytest.mark.asyncio
async def test_slow_selector_can_use_up_the_deadline(clock, make_source, make_element):
    source = make_source(
        {SEARCH: [[make_element()]]},
        latency={MISSING: 150},
        default_poller=Deadline(timeout_ms=100, interval_ms=10),
    )

    assert await source.query(MISSING).or_(SEARCH).all() == []
    # the deadline is checked right after the first selector
    assert source.lookups(SEARCH) == []


@pytest.mark.asyncio
async def test_no_such_element_is_treated_as_empty(clock, make_source, make_element):
    el = make_element()
    source = make_source({SEARCH: [[], [el]]}, not_found_raises=True, default_poller=MaxAttempts(max_tries=3, interval_ms=10))

    assert await source.query(SEARCH).first() is el


@pytest.mark.asyncio
async def test_remote_error_aborts_the_poll(clock, make_source):
    source = make_source({SEARCH: [[], RemoteError("session deleted")]}, default_poller=Deadline(timeout_ms=10_000, interval_ms=10))

    with pytest.raises(RemoteError, match="session deleted"):
        await source.query(SEARCH).first()
    assert len(source.lookups()) == 2


@pytest.mark.asyncio
async def test_single_selector_uses_find_element(clock, make_source, make_element):
    a, b = make_element("a"), make_element("b")
    source = make_source({SEARCH: [[a, b]]})

    assert await source.query(SEARCH).with_single_selector().all() == [a]
    assert source.calls == [("find_element", str(SEARCH))]


# ---------- Filters ----------

@pytest.mark.asyncio
async def test_filter_chain_short_circuits(clock, make_source, make_element):
    counts = {"a": 0, "b": 0}

    def reject_all(el):
        counts["a"] += 1
        return False

    def accept_all(el):
        counts["b"] += 1
        return True

    source = make_source({SEARCH: [[make_element("x"), make_element("y")]]}, default_poller=MaxAttempts(max_tries=2, interval_ms=0))
    result = await source.query(SEARCH).with_filter(reject_all).with_filter(accept_all).all()

    assert result == []
    assert counts == {"a": 4, "b": 0}


@pytest.mark.asyncio
async def test_filters_attach_to_last_selector(clock, make_source, make_element):
    disabled = make_element("disabled", enabled=False)
    enabled = make_element("enabled", text="Search")
    source = make_source({MISSING: [[disabled]], SEARCH: [[enabled]]})

    query = source.query(MISSING).and_enabled().or_(SEARCH).with_text(StringMatch("search").case_insensitive())
    assert await query.first() is enabled


@pytest.mark.asyncio
async def test_value_and_attribute_filters(clock, make_source, make_element):
    a = make_element("a", tag="input", value="x", attributes={"type": "text", "name": "q"})
    b = make_element("b", tag="input", value="y", attributes={"type": "text", "name": "other"})
    source = make_source({By.tag("input"): [[a, b]]})
    query = source.query(By.tag("input"))

    assert await query.with_tag("input").with_attributes([("type", "text"), ("name", "q")]).all() == [a]
    assert await query.with_value("y").all() == [b]
    assert await query.with_id("b").all() == [b]
    assert await query.and_not_selected().all() == [a, b]


@pytest.mark.asyncio
async def test_filter_remote_error_counts_as_no_match(clock, make_source, make_element):
    flaky = make_element("flaky")
    flaky.errors["is_displayed"] = RemoteError("stale element reference")
    ok = make_element("ok")
    source = make_source({SEARCH: [[flaky, ok]]})

    assert await source.query(SEARCH).and_displayed().all() == [ok]


@pytest.mark.asyncio
async def test_async_predicate_filter(clock, make_source, make_element):
    a, b = make_element("a", text="one"), make_element("b", text="two")
    source = make_source({SEARCH: [[a, b]]})

    async def says_two(el):
        return await el.text() == "two"

    assert await source.query(SEARCH).with_filter(FunctionFilter(says_two)).first() is b


# ---------- Builder ----------

def test_builder_returns_new_queries(make_source):
    source = make_source(default_poller=MaxAttempts(max_tries=3, interval_ms=10))
    base = source.query(MISSING)

    extended = base.or_(SEARCH).and_enabled()
    assert len(base.selectors) == 1 and base.selectors[0].filters == ()
    assert len(extended.selectors) == 2 and len(extended.selectors[1].filters) == 1

    assert base.nowait().poller == Immediate()
    assert base.wait(timeout_ms=500, interval_ms=50).poller == Deadline(timeout_ms=500, interval_ms=50)
    assert base.poller == source.default_poller == MaxAttempts(max_tries=3, interval_ms=10)


def test_filter_without_selector_is_noop(make_source):
    query = ElementQuery(source=make_source(), poller=Immediate())
    assert query.and_enabled().with_single_selector() == query
