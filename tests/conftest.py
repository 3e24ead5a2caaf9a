import pytest

import shellforms


@pytest.fixture
def script():
    def _script(source, /, *, resolver=None):
        return shellforms.compile_source(source, resolver=resolver)

    return _script
