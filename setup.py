"""Install the album submission service package."""

from setuptools import setup, find_packages

setup(
    name='tidalwav-submissions',
    version='0.3.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=[
        'flask>=2.3',
        'werkzeug>=2.3',
        'sqlalchemy>=2.0',
        'flask-sqlalchemy>=3.0',
        'jsonschema',
        'unidecode',
        'python-dateutil',
        'pytz',
        'typing_extensions'
    ],
    extras_require={
        'test': ['pytest']
    },
    package_data={
        'tidalwav': ['templates/*.html', 'templates/*/*.html',
                     'schema/resources/*.json']
    },
    include_package_data=True
)
