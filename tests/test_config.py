import os
from mock import patch

from bafseg import config
from bafseg.utils.config import typecast


def test_config_defaults():
    assert config.segment_baf.gamma == 10
    assert config.segment_baf.kmin == 3
    assert config.segment_baf.phasegamma == 3
    assert config.segment_baf.phasekmin == 3
    assert config.segment_baf.calc_seg_baf_option == 1
    assert config.segment_baf.min_sdev == 0.09
    assert config.segment_baf.plot_dir is None


def test_config_sv_defaults():
    assert config.segment_baf_sv.max_snp_distance == 3000000
    assert config.segment_baf_sv.no_segmentation is False
    assert config.segment_baf_sv.min_snps == 50


@patch.dict(os.environ, {'BAFSEG_SEGMENT_BAF_GAMMA': '5'})
def test_config_env_override():
    assert config.segment_baf.gamma == 5


def test_typecast():
    assert typecast('True') is True
    assert typecast('3') == 3
    assert typecast('0.5') == 0.5
    assert typecast('') is None
    assert typecast('""') == ''
    assert typecast('a, b') == ['a', 'b']
    assert typecast('sample') == 'sample'
