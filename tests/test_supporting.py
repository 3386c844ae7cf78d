import pytest

import bafseg.utils.Supporting as sp


def test_log_levels(capsys):
    sp.log(msg='segmenting\n', level='INFO')
    sp.warn('few SNPs\n')
    sp.log(msg='plain\n')
    err = capsys.readouterr().err

    assert sp.bcolors.OKGREEN + 'segmenting\n' + sp.bcolors.ENDC in err
    assert sp.bcolors.WARNING + 'few SNPs\n' + sp.bcolors.ENDC in err
    assert err.endswith('plain\n')


def test_log_step_has_timestamp(capsys):
    sp.log(msg='# Reading phased SNPs\n', level='STEP')
    err = capsys.readouterr().err
    assert err.startswith(sp.bcolors.BOLD + sp.bcolors.HEADER + '[')
    assert '# Reading phased SNPs' in err


def test_ensure():
    assert sp.ensure(True, 'not raised') is None
    with pytest.raises(KeyError, match='missing'):
        sp.ensure(False, 'missing', exception_class=KeyError)


def test_error_without_exception(capsys):
    sp.error('logged only\n')
    assert 'logged only' in capsys.readouterr().err
