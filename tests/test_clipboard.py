import pyperclip
import pytest

from advice_daily.clipboard import copy_advice
from advice_daily.errors import CopyFailedError
from advice_daily.models import Advice, ErrorKind


def test_copy_wraps_text_in_quotes():
    written = []

    result = copy_advice(Advice(text="Hi"), writer=written.append)

    assert written == ['"Hi"']
    assert result == '"Hi"'


def test_copy_uses_pyperclip_by_default(monkeypatch):
    written = []
    monkeypatch.setattr(pyperclip, "copy", written.append)

    copy_advice(Advice(text="Héllo", id=3))

    assert written == ['"Héllo"']


def test_copy_failure_raises_copy_failed():
    def broken(_text):
        raise pyperclip.PyperclipException("no clipboard mechanism")

    with pytest.raises(CopyFailedError) as excinfo:
        copy_advice(Advice(text="Hi"), writer=broken)

    assert excinfo.value.kind is ErrorKind.COPY_FAILED
    assert excinfo.value.message == "Copy failed"
