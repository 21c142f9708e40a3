import pytest

from kmstext.hook import Hook


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, parent, arg, data):
        self.calls.append((parent, arg, data))


def test_empty_hook_has_no_entries():
    hook = Hook()
    assert len(hook) == 0
    hook.call("p", "a")
    assert len(hook) == 0


def test_call_passes_parent_arg_data_in_order():
    hook = Hook()
    order = []
    hook.add(lambda p, a, d: order.append((p, a, d)), "first", False)
    hook.add(lambda p, a, d: order.append((p, a, d)), "second", False)
    hook.call("parent", "arg")
    assert order == [("parent", "arg", "first"), ("parent", "arg", "second")]
    assert len(hook) == 2


def test_oneshot_runs_once():
    hook = Hook()
    rec = Recorder()
    hook.add(rec, None, True)
    assert len(hook) == 1
    hook.call()
    hook.call()
    assert len(rec.calls) == 1
    assert len(hook) == 0


def test_add_rejects_non_callable():
    hook = Hook()
    with pytest.raises(TypeError):
        hook.add(42, None, False)
    assert len(hook) == 0


def test_add_single_does_not_duplicate():
    hook = Hook()
    rec = Recorder()
    data = object()
    hook.add_single(rec, data, False)
    hook.add_single(rec, data, True)
    assert len(hook) == 1
    hook.call()
    hook.call()
    assert len(rec.calls) == 2


def test_add_single_distinguishes_data():
    hook = Hook()
    rec = Recorder()
    hook.add_single(rec, "x", False)
    hook.add_single(rec, "y", False)
    assert len(hook) == 2


def test_remove_takes_most_recent_match():
    hook = Hook()
    rec = Recorder()
    hook.add(rec, None, False)
    hook.add(rec, None, True)
    hook.remove(rec, None)
    assert len(hook) == 1
    hook.call()
    hook.call()
    assert len(rec.calls) == 2


def test_remove_unknown_is_ignored():
    hook = Hook()
    rec = Recorder()
    hook.add(rec, "x", False)
    hook.remove(Recorder(), "x")
    hook.remove(rec, "other")
    assert len(hook) == 1


def test_remove_all():
    hook = Hook()
    rec = Recorder()
    other = Recorder()
    hook.add(rec, None, False)
    hook.add(other, None, False)
    hook.add(rec, None, False)
    hook.remove_all(rec, None)
    assert len(hook) == 1
    hook.call()
    assert rec.calls == []
    assert len(other.calls) == 1


def test_remove_upcoming_entry_during_call():
    hook = Hook()
    later = Recorder()

    def remover(parent, arg, data):
        hook.remove(later, None)

    hook.add(remover, None, False)
    hook.add(later, None, False)
    hook.call()
    assert later.calls == []
    assert len(hook) == 1


def test_nested_call_is_ignored():
    hook = Hook()
    depth = []

    def reenter(parent, arg, data):
        depth.append(len(hook))
        hook.call()

    hook.add(reenter, None, False)
    hook.call()
    assert depth == [1]
    assert len(hook) == 1
    hook.call()
    assert depth == [1, 1]


def test_free_during_call_is_deferred():
    hook = Hook()
    after = Recorder()

    def freer(parent, arg, data):
        hook.free()

    hook.add(freer, None, False)
    hook.add(after, None, False)
    hook.call()
    assert len(after.calls) == 1
    assert len(hook) == 0


def test_free_clears_entries():
    hook = Hook()
    rec = Recorder()
    hook.add(rec, None, False)
    hook.free()
    hook.call()
    assert rec.calls == []
    assert len(hook) == 0