# -*- coding: utf-8 -*-
from setuptools import setup

packages = \
['dualbootlib']

package_data = \
{'': ['*']}

modules = \
['dualboot']
install_requires = \
['typing-extensions>=4.4,<5.0']

entry_points = \
{'console_scripts': ['dualboot = dualbootlib._cli:main']}

setup_kwargs = {
    'name': 'dualboot',
    'version': '1.0.0',
    'description': 'Select the firmware slot a ZyXEL NBG6817 boots from',
    'long_description': "# Dual Boot Flag Tool\n\nThe ZyXEL NBG6817 has two firmware slots. The bootloader picks one of them from a single byte, the boot flag,\nstored at the start of the dual flag eMMC partition. `dualboot` reads and writes that byte, checks that the\nwhole partition is in a valid state, and shows the firmware and kernel versions installed in each slot.\n\n## Usage\n\n```\ndualboot list\ndualboot getactiveroot\ndualboot setactiveroot /dev/mmcblk0p8\n```\n\nAll output will be in JSON form and sent to `stdout`.\nDebugging information is sent to `stderr` when `--debug` is given.\nErrors are returned as `{\"error\": <msg>, \"code\": <code>}` and the exit status is the negated code.\n",
    'maintainer': 'None',
    'maintainer_email': 'None',
    'packages': packages,
    'package_data': package_data,
    'py_modules': modules,
    'install_requires': install_requires,
    'entry_points': entry_points,
    'python_requires': '>=3.8',
}


setup(**setup_kwargs)
