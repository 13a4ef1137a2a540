"""
Tests for direct messages and conversations.
"""

import pytest

from socialnet.errors import InvalidArgument, InvalidOperation, NotFound
from socialnet.models import MessageType, NotificationCategory
from socialnet.services import chat


@pytest.fixture
def people(make_account):
    return make_account("ann"), make_account("ben"), make_account("cat")


class TestSendMessage:
    def test_send_notifies_receiver(self, db, people):
        ann, ben, _ = people

        sent = chat.send_message(db, ann.id, ben.id, "hi ben")

        assert sent.message.message_type is MessageType.text
        assert sent.notification.recipient_id == ben.id
        assert sent.notification.category is NotificationCategory.message
        assert sent.notification.message_id == sent.message.id

    def test_unknown_receiver(self, db, people):
        ann, _, _ = people
        with pytest.raises(NotFound, match="Receiver"):
            chat.send_message(db, ann.id, 777, "hello?")

    def test_empty_body(self, db, people):
        ann, ben, _ = people
        with pytest.raises(InvalidArgument):
            chat.send_message(db, ann.id, ben.id, "   ")

    def test_invalid_type(self, db, people):
        ann, ben, _ = people
        with pytest.raises(InvalidOperation):
            chat.send_message(db, ann.id, ben.id, "hi", message_type="sticker")

    def test_message_to_self_has_no_notification(self, db, people):
        ann, _, _ = people
        sent = chat.send_message(db, ann.id, ann.id, "note to self")
        assert sent.notification is None


class TestReading:
    def test_history_oldest_first_and_marks_read(self, db, people):
        ann, ben, _ = people
        m1 = chat.send_message(db, ann.id, ben.id, "one").message
        m2 = chat.send_message(db, ben.id, ann.id, "two").message
        m3 = chat.send_message(db, ann.id, ben.id, "three").message

        page = chat.get_messages(db, ben.id, ann.id, 1, 50)

        assert [m.id for m in page.items] == [m1.id, m2.id, m3.id]
        assert m1.read and m3.read
        assert m1.read_at is not None
        # ben's own message to ann stays unread until ann opens the thread
        assert not m2.read

    def test_deleted_messages_hidden(self, db, people):
        ann, ben, _ = people
        keep = chat.send_message(db, ann.id, ben.id, "keep").message
        drop = chat.send_message(db, ann.id, ben.id, "drop").message

        chat.delete_message(db, ann.id, drop.id)

        assert [m.id for m in chat.get_messages(db, ann.id, ben.id, 1, 50).items] == [keep.id]

    def test_only_sender_deletes(self, db, people):
        ann, ben, _ = people
        msg = chat.send_message(db, ann.id, ben.id, "mine").message
        with pytest.raises(NotFound):
            chat.delete_message(db, ben.id, msg.id)

    def test_conversations_latest_first_with_unread(self, db, people):
        ann, ben, cat = people
        chat.send_message(db, ben.id, ann.id, "from ben")
        chat.send_message(db, ben.id, ann.id, "again from ben")
        last = chat.send_message(db, ann.id, cat.id, "to cat").message

        convs = chat.list_conversations(db, ann.id)

        assert [c.counterpart.id for c in convs] == [cat.id, ben.id]
        assert convs[0].last_message.id == last.id
        assert convs[0].unread_count == 0
        assert convs[1].unread_count == 2

    def test_no_conversations(self, db, people):
        ann, _, _ = people
        assert chat.list_conversations(db, ann.id) == []
