from setuptools import setup, find_packages
setup(
    name='okms-secrets',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    include_package_data=True,
    package_data={
        'okms_secrets': [
            'secrets/*.yaml',
            'config/*.ini',
        ],
    },
    description='Secrets connector for OKMS secret managers.',
    author='Your Name',
    author_email='youremail@example.com',
    python_requires='>=3.9',
    install_requires=[
        'invoke>=2.0.0',
        'pyyaml>=6.0',
        'requests>=2.25.0',
        'pydantic>=2.0.0',
        'cryptography>=41.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'okms-secrets = okms_secrets.cli:main',
        ],
    },
)
