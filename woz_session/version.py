"""Woz Session Meta information.
   Woz Session keeps the woz CLI authenticated between invocations.
"""
__title__ = 'woz_session'
__description__ = (
   'Woz Session keeps the woz CLI authenticated between invocations '
   'using an encrypted local secret store.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2019 Woz'
__author__ = 'Woz'
__author_email__ = 'hello@woz.sh'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/alexkehayias/woz'
