"""
Unit tests for the in-memory conversation store.
"""

import threading

from orchestrator.core.conversation_store import ConversationStore


def test_unknown_conversation_is_none() -> None:
    assert ConversationStore().get("missing") is None


def test_append_creates_conversation_with_user_then_assistant() -> None:
    store = ConversationStore()
    store.append("C1", "What are the KYC requirements?", "ID and proof of address.")

    conversation = store.get("C1")
    assert conversation.id == "C1"
    assert [(m.role, m.content) for m in conversation.messages] == [
        ("user", "What are the KYC requirements?"),
        ("assistant", "ID and proof of address."),
    ]
    assert conversation.messages[0].timestamp <= conversation.messages[1].timestamp
    assert conversation.start_time <= conversation.messages[0].timestamp


def test_history_only_grows() -> None:
    store = ConversationStore()
    store.append("C1", "q1", "a1")
    first = store.get("C1")
    store.append("C1", "q2", "a2")
    second = store.get("C1")

    assert len(first.messages) == 2
    assert len(second.messages) == 4
    assert second.messages[:2] == first.messages
    assert second.start_time == first.start_time


def test_returned_conversation_is_a_copy() -> None:
    store = ConversationStore()
    store.append("C1", "q", "a")
    snapshot = store.get("C1")
    snapshot.messages.clear()

    assert len(store.get("C1").messages) == 2


def test_conversations_are_separate() -> None:
    store = ConversationStore()
    store.append("A", "qa", "aa")
    store.append("B", "qb", "ab")

    assert len(store) == 2
    assert store.get("A").messages[0].content == "qa"
    assert store.get("B").messages[0].content == "qb"


def test_concurrent_appends_keep_pairs_together() -> None:
    store = ConversationStore()
    workers = 8
    per_worker = 25

    def worker(n: int) -> None:
        for i in range(per_worker):
            store.append("shared", f"q-{n}-{i}", f"a-{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    messages = store.get("shared").messages
    assert len(messages) == workers * per_worker * 2
    for user, assistant in zip(messages[::2], messages[1::2]):
        assert user.role == "user" and assistant.role == "assistant"
        assert user.content[1:] == assistant.content[1:]
