"""Script to synthesize and sanity-check the CloudFormation template."""
import subprocess
import json
import sys
import os
from pathlib import Path
from typing import Any, Dict, List


def synthesize_stacks() -> bool:
    """Synthesize all CDK stacks."""
    print("🔨 Synthesizing GuardDuty Summarizer CloudFormation templates...")

    # Change to infra directory
    infra_dir = Path(__file__).parent
    os.chdir(infra_dir)

    try:
        subprocess.run(
            ["cdk", "synth", "--all"],
            capture_output=True,
            text=True,
            check=True
        )

        print("✅ Synthesis completed successfully!")

        output_dir = Path("cdk.out")
        if output_dir.exists():
            print(f"\n📁 Generated CloudFormation templates in: {output_dir}")
            for template in output_dir.glob("*.template.json"):
                print(f"  - {template.name}")

        return True

    except subprocess.CalledProcessError as e:
        print(f"❌ Synthesis failed with error: {e.stderr}")
        return False
    except FileNotFoundError:
        print("❌ CDK CLI not found. Please install AWS CDK: npm install -g aws-cdk")
        return False


# Actions that do not support resource-level permissions
RESOURCE_WILDCARD_ONLY_ACTIONS = {
    "xray:PutTraceSegments",
    "xray:PutTelemetryRecords",
}


def find_wildcard_actions(template: Dict[str, Any]) -> List[str]:
    """Names of IAM policies that allow a wildcard action or resource.

    Statements limited to actions that only accept "*" as a resource are skipped.
    """
    offenders = []
    for resource_name, resource in template.get("Resources", {}).items():
        if resource.get("Type") != "AWS::IAM::Policy":
            continue

        statements = resource.get("Properties", {}).get("PolicyDocument", {}).get("Statement", [])
        for stmt in statements:
            if stmt.get("Effect") != "Allow":
                continue
            actions = stmt.get("Action", [])
            if isinstance(actions, str):
                actions = [actions]
            if set(actions) <= RESOURCE_WILDCARD_ONLY_ACTIONS:
                continue
            resources = stmt.get("Resource", [])
            if isinstance(resources, (str, dict)):
                resources = [resources]
            if any(action == "*" or action.endswith(":*") for action in actions) or "*" in resources:
                offenders.append(resource_name)
                break
    return offenders


def find_guardduty_rules(template: Dict[str, Any]) -> List[str]:
    """Names of EventBridge rules that match GuardDuty findings."""
    rules = []
    for resource_name, resource in template.get("Resources", {}).items():
        if resource.get("Type") != "AWS::Events::Rule":
            continue
        pattern = resource.get("Properties", {}).get("EventPattern", {})
        if "aws.guardduty" in pattern.get("source", []) and \
                "GuardDuty Finding" in pattern.get("detail-type", []):
            rules.append(resource_name)
    return rules


def validate_templates() -> bool:
    """Check synthesized templates for the routing rule and broad IAM grants."""
    print("\n🔒 Validating synthesized templates...")

    ok = True
    for template_file in Path("cdk.out").glob("*.template.json"):
        with open(template_file, 'r') as f:
            template = json.load(f)

        print(f"  Checking {template_file.name}")
        if not find_guardduty_rules(template):
            print("    ❌ No EventBridge rule routes GuardDuty findings")
            ok = False

        for policy_name in find_wildcard_actions(template):
            print(f"    ⚠️  Wildcard permissions found in {policy_name}")

    if ok:
        print("✅ Template validation completed")
    return ok


if __name__ == "__main__":
    print("🚀 GuardDuty Summarizer CDK Synthesis Tool")
    print("=" * 50)

    if synthesize_stacks() and validate_templates():
        print("\n" + "=" * 50)
        print("🎉 Synthesis completed successfully!")
        print("\nNext steps:")
        print("1. Review CloudFormation templates in cdk.out/")
        print("2. Deploy with: cdk deploy --parameters EmailAddress=you@example.com")
        print("3. Confirm the SNS subscription email")
    else:
        sys.exit(1)
