from setuptools import setup, find_packages

setup(
    name='cwindow',
    version='0.1.0',
    packages=find_packages(exclude=['tests']),
    include_package_data=True,
    package_data={'cwindow': ['configs/*.yml']},
    install_requires=[
        'PyYAML',      # For parsing YAML config files
        'click',       # For diagnostics on stderr
    ],
    extras_require={
        'test': ['pytest'],
    },
    description='Finds the cleanest electricity-grid window for EV charging from a generation-mix series.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
