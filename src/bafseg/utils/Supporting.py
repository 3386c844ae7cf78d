import sys
import datetime


class bcolors:
    HEADER = '\033[95m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


# format strings with 'timestamp' and 'msg' as placeholders
MSG_FORMAT_STRINGS = {
    'STEP': bcolors.BOLD + bcolors.HEADER + '[{timestamp}]{msg}' + bcolors.ENDC,
    'INFO': bcolors.OKGREEN + '{msg}' + bcolors.ENDC,
    'WARN': bcolors.WARNING + '{msg}' + bcolors.ENDC,
    'ERROR': bcolors.FAIL + '{msg}' + bcolors.ENDC
}


def log(msg, level=None, raise_exception=False, exception_class=ValueError):
    timestamp = '{:%Y-%b-%d %H:%M:%S}'.format(datetime.datetime.now())
    format_string = MSG_FORMAT_STRINGS.get(level) or '{msg}'
    formatted_msg = format_string.format(msg=msg, timestamp=timestamp)

    sys.stderr.write(formatted_msg)

    if level == 'ERROR' and raise_exception:
        raise exception_class(msg)


def logArgs(args, width=40):
    text = '\n'
    for key in args:
        text += '\t{}: {}\n'.format(key, args[key])
    log(msg=text, level='INFO')


def error(msg, raise_exception=False, exception_class=ValueError):
    return log(msg, level='ERROR', raise_exception=raise_exception, exception_class=exception_class)


def ensure(pred, msg, exception_class=ValueError):
    if not pred:
        return error(msg, raise_exception=True, exception_class=exception_class)


def warn(msg):
    log(msg=msg, level='WARN')
