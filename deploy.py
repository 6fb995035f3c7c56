"""
Contract Deployment Wrapper
Runs scripts/deploy_contract.py
"""

import subprocess
import sys

if __name__ == "__main__":
    print("=" * 70)
    print("BrainDance Contract Deployment")
    print("=" * 70)
    print()
    
    # Run deployment script, forwarding CLI arguments
    result = subprocess.run(
        [sys.executable, "-m", "scripts.deploy_contract", *sys.argv[1:]],
        cwd="."
    )
    
    sys.exit(result.returncode)
