"""
Builds FileMetaPy into a single executable.
"""
import os
import shutil
import subprocess
import sys

def build():
    print("Cleaning old builds...")
    for folder in ['build', 'dist']:
        if os.path.exists(folder):
            shutil.rmtree(folder)

    print("Building executable...")

    exe_name = 'filemeta.exe' if sys.platform.startswith('win') else 'filemeta'
    cmd = [
        'pyinstaller',
        '--onefile',
        '--console',
        '--name', 'filemeta',
        '--add-data', f'filemeta{os.pathsep}filemeta',
        '--hidden-import', 'PySide6',
        '--hidden-import', 'psutil',
        '--hidden-import', 'colorama',
        'main.py'
    ]

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.returncode == 0:
        print("Build finished!")
        exe_src = os.path.join('dist', exe_name)
        print(f"Executable: {exe_src}")

        release_dir = 'release'
        os.makedirs(release_dir, exist_ok=True)
        shutil.copy(exe_src, os.path.join(release_dir, exe_name))

        if os.path.exists('README.md'):
            shutil.copy('README.md', os.path.join(release_dir, 'README.md'))

        print(f"Release assembled in: {release_dir}/")
    else:
        print("Build failed:")
        print(result.stderr)
        sys.exit(1)

if __name__ == '__main__':
    build()
