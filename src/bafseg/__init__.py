__version__ = '0.1.0'

import os.path
from importlib.resources import path
import bafseg
from bafseg.utils.config import Config


with path(bafseg, 'bafseg.ini') as ini_file:
    filenames = [ini_file]
    # A bafseg.ini in the current working directory is read after the packaged one,
    # so that individual defaults can be overridden per run directory
    if os.path.exists('bafseg.ini'):
        filenames.append('bafseg.ini')
    config = Config('bafseg', filenames)
