import os
import configparser


def typecast(v):
    """
    Infer the type of a raw configuration value.
    'True'/'False' become booleans, numbers become int/float, an empty value becomes None
    and a comma-separated value becomes a list of stripped strings.
    """
    if v in ('True', 'False'):
        return v == 'True'
    try:
        return int(v)
    except ValueError:
        pass
    try:
        return float(v)
    except ValueError:
        pass

    # We interpret a missing value as None, and a "" as the empty string
    if v.startswith('"') and v.endswith('"'):
        return v[1:-1]
    if v == '':
        return None
    if ',' in v:
        return [t.strip() for t in v.split(',')]
    return v


class ConfigSection(object):
    """
    A thin wrapper over a ConfigParser's SectionProxy object,
    that infers the types of values, and makes them available as attributes
    """
    def __init__(self, config, section_proxy):
        self.config = config
        self.name = section_proxy.name
        self.d = {k: typecast(v) for k, v in section_proxy.items()}

    def __setattr__(self, key, value):
        if key in ('config', 'name', 'd'):
            return super(ConfigSection, self).__setattr__(key, value)
        else:
            self.d[key] = value

    def __getattr__(self, item):
        if item in ('config', 'name', 'd'):
            raise AttributeError(item)
        # An environment variable <CONFIG_NAME>_<SECTION>_<ITEM> takes precedence over the files
        env_varname = '_'.join([str(x).upper() for x in [self.config.name, self.name, item]])
        env_var = os.getenv(env_varname)
        if env_var is not None:
            return typecast(env_var)
        try:
            return self.d[item]
        except KeyError:
            raise AttributeError(f'No setting "{item}" in section [{self.name}]')

    def items(self):
        return self.d.items()


class Config(object):
    def __init__(self, name, filenames):
        self.name = name
        self.config = configparser.ConfigParser(inline_comment_prefixes='#')
        self.init_from_files(filenames)

    def init_from_files(self, filenames):
        self.config.read(filenames)
        self._read_sections()

    def _read_sections(self):
        for section in self.config.sections():
            setattr(self, section, ConfigSection(self, self.config[section]))

    def sections(self):
        return self.config.sections()
